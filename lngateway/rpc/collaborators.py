"""Client adapters for the node subsystems the gateway talks to.

The backend Protocols describe what the node exposes. Each adapter wraps one
backend and bounds every call with ``asyncio.wait_for``; a timeout surfaces
as CollaboratorTimeoutError and any other backend exception as
CollaboratorError, so the executor sees one failure shape regardless of
which subsystem failed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Sequence
from typing import Protocol, TypeVar

from lngateway.core.errors import CollaboratorError, CollaboratorTimeoutError, GatewayError
from lngateway.core.types import (
    ChannelDescriptor,
    ChannelInfo,
    FlareInfo,
    PaymentEvent,
    RouteResponse,
    RoutingTable,
)
from lngateway.rpc.commands import ChannelCommand

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_COLLABORATOR_TIMEOUT = 30.0


# === Backend protocols ===


class ChannelRef(Protocol):
    """Handle on a single live channel."""

    async def get_info(self) -> ChannelInfo: ...


class RegistryBackend(Protocol):
    """Channel registry: knows every channel and routes commands to them."""

    async def list_channels(self) -> Iterable[ChannelRef]: ...

    async def send_command(self, channel_id: str, command: ChannelCommand) -> None: ...


class RouterBackend(Protocol):
    """Routing and topology engine."""

    async def network(self) -> Sequence[ChannelDescriptor]: ...

    async def beacons(self) -> Sequence[bytes]: ...

    async def find_route(self, node_id: bytes, routing_table: RoutingTable) -> RouteResponse: ...

    async def info(self) -> FlareInfo: ...


class PaymentSpawnerBackend(Protocol):
    """Creates outgoing payments."""

    async def create_payment(
        self,
        amount: int,
        payment_hash: bytes,
        node_id: bytes,
        routing_table: RoutingTable | None,
    ) -> PaymentEvent: ...


class PaymentHandlerBackend(Protocol):
    """Owns incoming payment preimages."""

    async def generate_hash(self) -> bytes: ...


class PeerConnector(Protocol):
    """Opens a channel with a remote node."""

    async def connect(self, host: str, port: int, amount: int) -> None: ...


# === Adapters ===


class _Adapter:
    """Shared bounded-wait call logic for collaborator adapters."""

    name = "collaborator"

    def __init__(self, timeout: float = DEFAULT_COLLABORATOR_TIMEOUT) -> None:
        self._timeout = timeout

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except TimeoutError:
            logger.warning(
                "%s.%s timed out after %ss", self.name, operation, self._timeout
            )
            raise CollaboratorTimeoutError(self.name, operation, self._timeout) from None
        except GatewayError:
            raise
        except Exception as e:
            logger.warning("%s.%s failed: %s", self.name, operation, e)
            raise CollaboratorError(
                self.name, operation, f"{self.name}.{operation} failed: {e}"
            ) from e


class RegistryClient(_Adapter):
    """Adapter for the channel registry."""

    name = "registry"

    def __init__(
        self, backend: RegistryBackend, timeout: float = DEFAULT_COLLABORATOR_TIMEOUT
    ) -> None:
        super().__init__(timeout)
        self._backend = backend

    async def list_channels(self) -> list[ChannelRef]:
        channels = await self._call("list_channels", self._backend.list_channels())
        return list(channels)

    async def channel_info(self, channel: ChannelRef) -> ChannelInfo:
        return await self._call("get_info", channel.get_info())

    async def send_command(self, channel_id: str, command: ChannelCommand) -> None:
        await self._call("send_command", self._backend.send_command(channel_id, command))


class RouterClient(_Adapter):
    """Adapter for the router."""

    name = "router"

    def __init__(
        self, backend: RouterBackend, timeout: float = DEFAULT_COLLABORATOR_TIMEOUT
    ) -> None:
        super().__init__(timeout)
        self._backend = backend

    async def network(self) -> list[ChannelDescriptor]:
        return list(await self._call("network", self._backend.network()))

    async def beacons(self) -> list[bytes]:
        return list(await self._call("beacons", self._backend.beacons()))

    async def find_route(self, node_id: bytes, routing_table: RoutingTable) -> RouteResponse:
        return await self._call("find_route", self._backend.find_route(node_id, routing_table))

    async def info(self) -> FlareInfo:
        return await self._call("info", self._backend.info())


class PaymentSpawnerClient(_Adapter):
    """Adapter for the payment spawner."""

    name = "payment_spawner"

    def __init__(
        self, backend: PaymentSpawnerBackend, timeout: float = DEFAULT_COLLABORATOR_TIMEOUT
    ) -> None:
        super().__init__(timeout)
        self._backend = backend

    async def create_payment(
        self,
        amount: int,
        payment_hash: bytes,
        node_id: bytes,
        routing_table: RoutingTable | None = None,
    ) -> PaymentEvent:
        return await self._call(
            "create_payment",
            self._backend.create_payment(amount, payment_hash, node_id, routing_table),
        )


class PaymentHandlerClient(_Adapter):
    """Adapter for the payment handler."""

    name = "payment_handler"

    def __init__(
        self, backend: PaymentHandlerBackend, timeout: float = DEFAULT_COLLABORATOR_TIMEOUT
    ) -> None:
        super().__init__(timeout)
        self._backend = backend

    async def generate_hash(self) -> bytes:
        return await self._call("generate_hash", self._backend.generate_hash())


class PeerClient(_Adapter):
    """Adapter for the peer connector."""

    name = "peer"

    def __init__(
        self, backend: PeerConnector, timeout: float = DEFAULT_COLLABORATOR_TIMEOUT
    ) -> None:
        super().__init__(timeout)
        self._backend = backend

    async def connect(self, host: str, port: int, amount: int) -> None:
        await self._call("connect", self._backend.connect(host, port, amount))
