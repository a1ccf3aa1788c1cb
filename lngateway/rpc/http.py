"""HTTP front for the JSON-RPC gateway, on plain asyncio streams.

One JSON-RPC call per POST to ``/``; the connection is closed after the reply.

Every reply, success or failure, carries the same fixed header set
(permissive CORS, no-store caching, allowed methods):

- 200 with a result envelope when the call succeeded
- 500 with an error envelope when parsing, dispatch or a collaborator failed
- 400/404/405 with an error envelope for HTTP-level problems

Example usage:
    dispatcher = Dispatcher(executor)
    await run_http_server(dispatcher, port=8080)
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from http import HTTPStatus

from lngateway.core.errors import GatewayError
from lngateway.rpc.dispatcher import Dispatcher
from lngateway.rpc.protocol import make_error_response, serialize_response

logger = logging.getLogger(__name__)

# Constants
DEFAULT_PORT = 8080
DEFAULT_HOST = "127.0.0.1"
RPC_PATH = "/"
MAX_BODY_SIZE = 1_048_576  # 1MB

# HTTP header limits
MAX_HEADERS_COUNT = 128
MAX_HEADER_NAME_LEN = 1024
MAX_HEADER_VALUE_LEN = 8192
MAX_TOTAL_HEADERS_SIZE = 32 * 1024
MAX_REQUEST_LINE_LEN = 8192

READ_TIMEOUT = 30.0

# Sent on every response, in this order
RESPONSE_HEADERS: tuple[tuple[str, str], ...] = (
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Headers", "Content-Type"),
    ("Access-Control-Allow-Methods", "PUT, GET, POST, DELETE, OPTIONS"),
    ("Cache-control", "public, no-store, max-age=0"),
    ("Access-Control-Allow-Headers", "x-requested-with"),
)

_LOOPBACK_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})

@dataclass
class HttpRequest:
    """Parsed HTTP request.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: Request path without query string (e.g., "/")
        headers: Dict of lowercase header names to values
        body: Request body as string
    """

    method: str
    path: str
    headers: dict[str, str]
    body: str


class HttpParseError(GatewayError):
    """Raised when HTTP request parsing fails."""


async def _read(awaitable: Awaitable[bytes], what: str) -> bytes:
    try:
        return await asyncio.wait_for(awaitable, timeout=READ_TIMEOUT)
    except TimeoutError:
        raise HttpParseError(f"Timed out reading {what}") from None


def _decode(raw: bytes, what: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HttpParseError(f"{what} is not UTF-8: {e}") from e


def _parse_request_line(line: str) -> tuple[str, str]:
    """Split ``METHOD TARGET VERSION`` and drop any query string."""
    parts = line.split(" ")
    if len(parts) != 3:
        raise HttpParseError(f"Invalid request line: {line!r}")
    method, target, _version = parts
    return method, target.partition("?")[0]


async def _read_headers(reader: asyncio.StreamReader) -> dict[str, str]:
    headers: dict[str, str] = {}
    consumed = 0
    while True:
        raw = await _read(reader.readline(), "headers")
        if raw in (b"", b"\r\n", b"\n"):
            return headers

        consumed += len(raw)
        if consumed > MAX_TOTAL_HEADERS_SIZE:
            raise HttpParseError(f"Headers exceed {MAX_TOTAL_HEADERS_SIZE} bytes")
        if len(headers) >= MAX_HEADERS_COUNT:
            raise HttpParseError(f"More than {MAX_HEADERS_COUNT} headers")

        name, sep, value = _decode(raw, "Header").partition(":")
        if not sep:
            continue
        name, value = name.strip().lower(), value.strip()
        if len(name) > MAX_HEADER_NAME_LEN or len(value) > MAX_HEADER_VALUE_LEN:
            raise HttpParseError(f"Header {name[:64]!r} too long")
        headers[name] = value


def _content_length(headers: dict[str, str]) -> int:
    raw = headers.get("content-length", "0")
    if not raw.isdigit():
        raise HttpParseError(f"Invalid Content-Length: {raw!r}")
    length = int(raw)
    if length > MAX_BODY_SIZE:
        raise HttpParseError(f"Request body too large: {length} > {MAX_BODY_SIZE}")
    return length


async def read_http_request(reader: asyncio.StreamReader) -> HttpRequest:
    """Read one HTTP/1.x request from the stream.

    Raises:
        HttpParseError: If the request is malformed, too large, or arrives
            too slowly.
    """
    line = await _read(reader.readline(), "request line")
    if not line:
        raise HttpParseError("Empty request")
    if len(line) > MAX_REQUEST_LINE_LEN:
        raise HttpParseError(f"Request line exceeds {MAX_REQUEST_LINE_LEN} bytes")
    method, path = _parse_request_line(_decode(line, "Request line").strip())

    headers = await _read_headers(reader)
    length = _content_length(headers)

    body = ""
    if length:
        try:
            raw_body = await _read(reader.readexactly(length), "body")
        except asyncio.IncompleteReadError as e:
            raise HttpParseError(
                f"Incomplete body: expected {length}, got {len(e.partial)}"
            ) from e
        body = _decode(raw_body, "Body")

    return HttpRequest(method=method, path=path, headers=headers, body=body)


def build_http_response(status: int, body: str) -> bytes:
    """Frame a JSON body as an HTTP/1.1 response carrying the fixed headers."""
    payload = body.encode("utf-8")
    head = [f"HTTP/1.1 {status} {HTTPStatus(status).phrase}"]
    head += [f"{name}: {value}" for name, value in RESPONSE_HEADERS]
    head += [
        "Content-Type: application/json; charset=utf-8",
        f"Content-Length: {len(payload)}",
        "Connection: close",
    ]
    return ("\r\n".join(head) + "\r\n\r\n").encode("utf-8") + payload


async def send_http_response(writer: asyncio.StreamWriter, status: int, body: str) -> None:
    writer.write(build_http_response(status, body))
    await writer.drain()


async def _reject(writer: asyncio.StreamWriter, status: int, message: str) -> None:
    """Answer an HTTP-level problem with an error envelope (id unknown)."""
    body = serialize_response(make_error_response(None, message))
    await send_http_response(writer, status, body)


async def _respond(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    dispatcher: Dispatcher,
) -> None:
    try:
        request = await read_http_request(reader)
    except HttpParseError as e:
        logger.debug("Bad HTTP request: %s", e.message)
        await _reject(writer, 400, e.message)
        return

    if request.path != RPC_PATH:
        await _reject(writer, 404, f"Not found: {request.path}")
        return
    if request.method != "POST":
        await _reject(writer, 405, f"Method {request.method} not allowed, use POST")
        return

    response = await dispatcher.dispatch_body(request.body)
    await send_http_response(
        writer,
        200 if response.error is None else 500,
        serialize_response(response),
    )


async def handle_connection(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    dispatcher: Dispatcher,
) -> None:
    """Serve exactly one request on a connection, then close it.

    A result is sent as 200 and any error envelope as 500. Requests for
    another path get 404, other HTTP methods 405, and unparseable HTTP 400.
    """
    try:
        await _respond(reader, writer, dispatcher)
    except ConnectionError as e:
        logger.debug("Client went away: %s", e)
    except Exception as e:
        logger.error("Unexpected error serving connection: %s", e, exc_info=True)
        try:
            await _reject(writer, 500, f"Server error: {type(e).__name__}")
        except ConnectionError as send_err:
            logger.debug("Could not report server error: %s", send_err)
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError as close_err:
            logger.debug("Error while closing connection: %s", close_err)


async def run_http_server(
    dispatcher: Dispatcher,
    port: int = DEFAULT_PORT,
    host: str = DEFAULT_HOST,
    max_concurrent: int = 32,
    started_event: asyncio.Event | None = None,
) -> None:
    """Serve the gateway until the dispatcher reports a shutdown request.

    Args:
        dispatcher: Turns request bodies into responses; its
            ``shutdown_requested`` flag ends the loop.
        port: Port to listen on (0 picks a free one).
        host: Address to bind.
        max_concurrent: Connections served at once; others wait.
        started_event: Set once the socket is listening.
    """
    if host not in _LOOPBACK_HOSTS:
        logger.warning("Listening on non-loopback address %s without authentication", host)

    slots = asyncio.Semaphore(max_concurrent)

    async def on_connect(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        async with slots:
            await handle_connection(reader, writer, dispatcher)

    server = await asyncio.start_server(on_connect, host=host, port=port)
    bound = server.sockets[0].getsockname() if server.sockets else (host, port)
    logger.info("Gateway listening on http://%s:%s/", bound[0], bound[1])
    if started_event is not None:
        started_event.set()

    started = time.monotonic()
    async with server:
        while not dispatcher.shutdown_requested:
            await asyncio.sleep(0.1)
    logger.info("Gateway stopped after %.0fs", time.monotonic() - started)
