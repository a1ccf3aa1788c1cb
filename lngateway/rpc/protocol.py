"""JSON-RPC parsing and serialization for the gateway endpoint."""

import dataclasses
import json
from enum import Enum
from typing import Any

from lngateway.core.errors import DispatchError
from lngateway.rpc.types import Request, Response

# Every failure is reported with this single code
GENERIC_ERROR = -1

DEFAULT_PROTOCOL_VERSION = "1.0"


class ParseError(DispatchError):
    """Raised when a request body cannot be parsed into a Request.

    Attributes:
        request_id: The id read from the body before parsing failed, if any.
    """

    def __init__(self, message: str, request_id: str | int | None = None) -> None:
        self.request_id = request_id
        super().__init__(message)


def _is_valid_id(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def parse_request(body: str) -> Request:
    """Parse an HTTP body into a Request.

    Args:
        body: Raw request body text.

    Returns:
        A parsed Request object.

    Raises:
        ParseError: If the JSON is invalid or required fields are missing.
            The error carries the request id when it could be read.
    """
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Request must be a JSON object")

    request_id = data.get("id")
    if request_id is not None and not _is_valid_id(request_id):
        raise ParseError(f"id must be string or integer, got: {type(request_id).__name__}")

    jsonrpc = data.get("jsonrpc", DEFAULT_PROTOCOL_VERSION)
    if not isinstance(jsonrpc, str):
        raise ParseError(
            f"jsonrpc must be a string, got: {type(jsonrpc).__name__}", request_id
        )

    method = data.get("method")
    if not isinstance(method, str):
        raise ParseError(
            f"method must be a string, got: {type(method).__name__}", request_id
        )

    if "params" not in data:
        raise ParseError("params is required", request_id)
    params = data["params"]
    if not isinstance(params, list):
        raise ParseError(
            f"params must be an array, got: {type(params).__name__}", request_id
        )

    return Request(jsonrpc=jsonrpc, method=method, params=params, id=request_id)


def to_jsonable(value: Any) -> Any:
    """Convert collaborator results into JSON-compatible values.

    Dataclasses become objects, bytes become lowercase hex, enums become their
    values, and sets/tuples become arrays.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, Enum):
        return to_jsonable(value.value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_response(response: Response) -> str:
    """Serialize a Response to pretty-printed JSON.

    Success envelopes carry ``result`` and ``id``; error envelopes carry
    ``result: null``, ``error`` and ``id``.
    """
    data: dict[str, Any] = {"result": to_jsonable(response.result)}
    if response.error is not None:
        data["result"] = None
        data["error"] = response.error
    data["id"] = response.id
    return json.dumps(data, indent=2)


def make_error_response(
    request_id: str | int | None,
    message: str,
    code: int = GENERIC_ERROR,
) -> Response:
    """Create an error response.

    Args:
        request_id: The id from the original request, if known.
        message: Human-readable error message.
        code: Error code (always -1 on the gateway endpoint).

    Returns:
        A Response with the error field populated.
    """
    return Response(id=request_id, error={"code": code, "message": message})


def make_success_response(request_id: str | int | None, result: Any) -> Response:
    """Create a success response."""
    return Response(id=request_id, result=result)


# === Client-side functions ===


def serialize_request(request: Request) -> str:
    """Serialize a Request to compact JSON."""
    data: dict[str, Any] = {
        "jsonrpc": request.jsonrpc,
        "id": request.id,
        "method": request.method,
        "params": request.params,
    }
    return json.dumps(data, separators=(",", ":"))


def parse_response(text: str) -> Response:
    """Parse a response envelope returned by the gateway.

    Raises:
        ParseError: If the JSON is invalid or the envelope is malformed.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Response must be a JSON object")

    if "id" not in data:
        raise ParseError("Response must have 'id' field")

    error = data.get("error")
    if error is not None:
        if not isinstance(error, dict):
            raise ParseError(f"error must be an object, got: {type(error).__name__}")
        if "code" not in error or "message" not in error:
            raise ParseError("error must have 'code' and 'message' fields")
    elif "result" not in data:
        raise ParseError("Response must have either 'result' or 'error'")

    return Response(id=data["id"], result=data.get("result"), error=error)
