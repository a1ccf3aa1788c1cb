"""Async HTTP client for the lngateway JSON-RPC endpoint."""

import logging
from typing import Any

import httpx

from lngateway.core.errors import GatewayError
from lngateway.rpc.http import DEFAULT_PORT
from lngateway.rpc.protocol import ParseError, parse_response, serialize_request
from lngateway.rpc.types import Request, Response

logger = logging.getLogger(__name__)


class ClientError(GatewayError):
    """Exception for client-side errors (connection, timeout, protocol, RPC error)."""


class GatewayClient:
    """Async HTTP client for a running gateway.

    Usage:
        async with GatewayClient("http://127.0.0.1:8080/") as client:
            info = await client.info()
            encoded = await client.gen_payment_request(1000)
    """

    def __init__(self, url: str | None = None, timeout: float = 60.0) -> None:
        """Initialize the client.

        Args:
            url: URL of the gateway endpoint. Defaults to the local default port.
            timeout: Request timeout in seconds.
        """
        self._url = url or f"http://127.0.0.1:{DEFAULT_PORT}/"
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._request_id = 0
        logger.debug("GatewayClient initialized: url=%s, timeout=%s", self._url, timeout)

    async def __aenter__(self) -> "GatewayClient":
        self._client = httpx.AsyncClient(timeout=self._timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _next_id(self) -> str:
        self._request_id += 1
        return str(self._request_id)

    async def _call(self, method: str, params: list[Any]) -> Response:
        """Make a JSON-RPC call and return the parsed response.

        Raises:
            ClientError: On connection error, timeout, or protocol error.
        """
        if self._client is None:
            raise ClientError("Client not initialized. Use 'async with' context manager.")

        request = Request(jsonrpc="1.0", method=method, params=params, id=self._next_id())

        logger.debug("RPC call: method=%s, id=%s", method, request.id)
        try:
            response = await self._client.post(
                self._url,
                content=serialize_request(request),
                headers={"Content-Type": "application/json"},
            )
            return parse_response(response.text)
        except httpx.ConnectError as e:
            logger.warning("Connection failed to %s: %s", self._url, e)
            raise ClientError(f"Connection failed: {e}") from e
        except httpx.TimeoutException as e:
            logger.warning("Request timed out: method=%s, timeout=%s", method, self._timeout)
            raise ClientError(f"Request timed out: {e}") from e
        except ParseError as e:
            logger.warning("Invalid server response for method=%s: %s", method, e)
            raise ClientError(f"Invalid server response: {e}") from e

    def _check(self, response: Response) -> Any:
        """Extract result from response or raise ClientError on error."""
        if response.error:
            code = response.error.get("code", -1)
            message = response.error.get("message", "Unknown error")
            logger.warning("RPC error %d: %s", code, message)
            raise ClientError(f"RPC error {code}: {message}")
        return response.result

    async def call(self, method: str, *params: Any) -> Any:
        """Call any gateway method with positional parameters."""
        return self._check(await self._call(method, list(params)))

    async def info(self) -> dict[str, Any]:
        return await self.call("info")

    async def help(self) -> list[str]:
        return await self.call("help")

    async def list_channels(self) -> list[Any]:
        return await self.call("list")

    async def network(self) -> list[Any]:
        return await self.call("network")

    async def connect(self, host: str, port: int, amount: int) -> str:
        return await self.call("connect", host, port, amount)

    async def gen_payment_request(self, amount: int) -> str:
        """Ask the node for a base64 payment request of ``amount`` millisatoshi."""
        return await self.call("genpaymentrequest", amount)

    async def pay(self, payment_request: str) -> Any:
        return await self.call("pay", payment_request)

    async def find_route(self, payment_request: str) -> Any:
        return await self.call("findroute", payment_request)

    async def close(self, channel_id: str, script_pubkey: str | None = None) -> str:
        if script_pubkey is None:
            return await self.call("close", channel_id)
        return await self.call("close", channel_id, script_pubkey)

    async def shutdown(self) -> str:
        """Ask the gateway process to shut down."""
        return await self.call("suicide")
