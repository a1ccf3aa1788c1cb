"""Argument parsing for the lngateway CLI."""

import argparse
from pathlib import Path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="lngateway",
        description="JSON-RPC gateway for a payment-channel node",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the gateway HTTP server",
    )
    serve_parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Config file (default: layered ~/.lngateway and ./.lngateway config)",
    )
    serve_parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: server.port from config)",
    )
    serve_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug output on the console",
    )
    serve_parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path(".lngateway/logs"),
        help="Directory for server.log (default: .lngateway/logs)",
    )

    call_parser = subparsers.add_parser(
        "call",
        help="Send one JSON-RPC call to a running gateway",
    )
    call_parser.add_argument("method", help="Method name (e.g. info, list, genpaymentrequest)")
    call_parser.add_argument(
        "params",
        nargs="*",
        help="Positional parameters; JSON literals are decoded, anything else is a string",
    )
    call_parser.add_argument(
        "--url",
        default=None,
        help="Gateway URL (default: http://127.0.0.1:8080/)",
    )
    call_parser.add_argument(
        "--timeout",
        type=float,
        default=60.0,
        help="Request timeout in seconds (default: 60)",
    )

    return parser.parse_args(argv)
