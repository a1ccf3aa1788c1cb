"""JSON-RPC request and response types for the gateway."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Request:
    """A JSON-RPC call with positional parameters.

    Attributes:
        jsonrpc: Protocol version string sent by the caller (defaults to "1.0").
        method: Name of the method to invoke.
        params: Ordered positional parameters; order and types select the route.
        id: Opaque request identifier, echoed verbatim in the response.
    """

    jsonrpc: str
    method: str
    params: list[Any] = field(default_factory=list)
    id: str | int | None = None


@dataclass
class Response:
    """A JSON-RPC response envelope.

    Attributes:
        id: Request identifier from the original request (None if unreadable).
        result: Result of the call (mutually exclusive with error).
        error: Error object ``{"code", "message"}`` if the call failed.
    """

    id: str | int | None
    result: Any | None = None
    error: dict[str, Any] | None = None
