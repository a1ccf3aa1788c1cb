"""Command-line interface for lngateway."""
