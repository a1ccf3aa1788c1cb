"""Allow running as ``python -m lngateway``."""

from lngateway.cli.main import main

main()
