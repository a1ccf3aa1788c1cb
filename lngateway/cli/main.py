"""Entry point for the lngateway CLI."""

import asyncio

from lngateway.cli.arg_parser import parse_args
from lngateway.cli.output import print_error


def main(argv: list[str] | None = None) -> None:
    """Entry point for the lngateway CLI."""
    args = parse_args(argv)
    from lngateway.cli.commands import cmd_call, cmd_serve

    try:
        if args.command == "serve":
            exit_code = asyncio.run(cmd_serve(args.config, args.port, args.verbose, args.log_dir))
        elif args.command == "call":
            exit_code = asyncio.run(cmd_call(args.method, args.params, args.url, args.timeout))
        else:
            print_error("No command given. Use 'lngateway serve' or 'lngateway call METHOD'.")
            exit_code = 1
    except KeyboardInterrupt:
        exit_code = 130
    raise SystemExit(exit_code)
