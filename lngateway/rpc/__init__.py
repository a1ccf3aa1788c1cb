"""JSON-RPC gateway over HTTP.

Example usage:
    python -m lngateway serve
    curl -X POST http://localhost:8080/ \\
        -d '{"jsonrpc":"1.0","id":"1","method":"info","params":[]}'
"""

from lngateway.rpc.bootstrap import bootstrap_gateway, configure_server_logging
from lngateway.rpc.commands import Command
from lngateway.rpc.dispatch_table import ROUTES, ParamKind, Route, match_command
from lngateway.rpc.dispatcher import Dispatcher
from lngateway.rpc.executor import Collaborators, CommandExecutor
from lngateway.rpc.http import (
    DEFAULT_PORT,
    MAX_BODY_SIZE,
    RESPONSE_HEADERS,
    HttpParseError,
    HttpRequest,
    handle_connection,
    read_http_request,
    run_http_server,
    send_http_response,
)
from lngateway.rpc.protocol import (
    GENERIC_ERROR,
    ParseError,
    make_error_response,
    make_success_response,
    parse_request,
    parse_response,
    serialize_request,
    serialize_response,
)
from lngateway.rpc.types import Request, Response

__all__ = [
    # Types
    "Request",
    "Response",
    "HttpRequest",
    "Command",
    # Protocol functions (server-side)
    "parse_request",
    "serialize_response",
    "make_error_response",
    "make_success_response",
    # Protocol functions (client-side)
    "serialize_request",
    "parse_response",
    # Dispatch
    "ROUTES",
    "ParamKind",
    "Route",
    "match_command",
    "Dispatcher",
    "Collaborators",
    "CommandExecutor",
    # HTTP server
    "run_http_server",
    "handle_connection",
    "read_http_request",
    "send_http_response",
    "DEFAULT_PORT",
    "MAX_BODY_SIZE",
    "RESPONSE_HEADERS",
    # Bootstrap
    "bootstrap_gateway",
    "configure_server_logging",
    # Errors
    "GENERIC_ERROR",
    "ParseError",
    "HttpParseError",
]
