"""In-process stand-ins for the node subsystems.

These let the gateway run without a node attached (``lngateway serve``) and
give integration tests real collaborators to talk to. They hold just enough
state to answer consistently: known channels, a static network graph and the
preimages of generated payment hashes. No channel logic lives here.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from lngateway.core.types import (
    ChannelDescriptor,
    ChannelInfo,
    FlareInfo,
    PaymentEvent,
    RouteResponse,
    RoutingTable,
)
from lngateway.rpc.collaborators import (
    ChannelRef,
    PaymentHandlerClient,
    PaymentSpawnerClient,
    PeerClient,
    RegistryClient,
    RouterClient,
)
from lngateway.rpc.commands import ChannelCommand, CloseChannel
from lngateway.rpc.executor import Collaborators

logger = logging.getLogger(__name__)


class UnknownChannelError(Exception):
    """Raised when a command targets a channel the registry does not know."""


@dataclass
class LoopbackChannel:
    """A channel that only reports its state and records received commands."""

    channel_id: str
    remote_node_id: bytes
    state: str = "NORMAL"
    commands: list[ChannelCommand] = field(default_factory=list)

    async def get_info(self) -> ChannelInfo:
        return ChannelInfo(
            node_id=self.remote_node_id,
            channel_id=self.channel_id,
            state=self.state,
        )


class LoopbackRegistry:
    """Registry over a fixed set of loopback channels."""

    def __init__(self, channels: Iterable[LoopbackChannel] = ()) -> None:
        self._channels = {c.channel_id: c for c in channels}

    async def list_channels(self) -> list[ChannelRef]:
        return list(self._channels.values())

    async def send_command(self, channel_id: str, command: ChannelCommand) -> None:
        channel = self._channels.get(channel_id)
        if channel is None:
            raise UnknownChannelError(f"unknown channel {channel_id}")
        channel.commands.append(command)
        if isinstance(command, CloseChannel):
            channel.state = "CLOSING"
        logger.debug("Channel %s accepted %s", channel_id, type(command).__name__)


class LoopbackRouter:
    """Router with a static graph and direct routes only."""

    def __init__(
        self,
        graph: Sequence[ChannelDescriptor] = (),
        beacons: Sequence[bytes] = (),
    ) -> None:
        self._graph = list(graph)
        self._beacons = list(beacons)

    async def network(self) -> list[ChannelDescriptor]:
        return list(self._graph)

    async def beacons(self) -> list[bytes]:
        return list(self._beacons)

    async def find_route(self, node_id: bytes, routing_table: RoutingTable) -> RouteResponse:
        return RouteResponse(route=(node_id,))

    async def info(self) -> FlareInfo:
        known = {c.node_a for c in self._graph} | {c.node_b for c in self._graph}
        return FlareInfo(neighbors=len(self._graph), known_nodes=len(known))


class LoopbackPaymentHandler:
    """Generates payment hashes and remembers their preimages."""

    def __init__(self) -> None:
        self.preimages: dict[bytes, bytes] = {}

    async def generate_hash(self) -> bytes:
        preimage = secrets.token_bytes(32)
        payment_hash = hashlib.sha256(preimage).digest()
        self.preimages[payment_hash] = preimage
        return payment_hash


class LoopbackPaymentSpawner:
    """Accepts every payment and records it."""

    def __init__(self) -> None:
        self.payments: list[tuple[int, bytes, bytes, RoutingTable | None]] = []

    async def create_payment(
        self,
        amount: int,
        payment_hash: bytes,
        node_id: bytes,
        routing_table: RoutingTable | None,
    ) -> PaymentEvent:
        self.payments.append((amount, payment_hash, node_id, routing_table))
        return PaymentEvent(status="sent", payment_hash=payment_hash)


class LoopbackPeerConnector:
    """Records connection attempts."""

    def __init__(self) -> None:
        self.connections: list[tuple[str, int, int]] = []

    async def connect(self, host: str, port: int, amount: int) -> None:
        self.connections.append((host, port, amount))
        logger.info("Connect requested to %s:%s with %s sat", host, port, amount)


def create_loopback_collaborators(timeout: float) -> Collaborators:
    """Wrap a fresh set of loopback backends in collaborator adapters."""
    return Collaborators(
        registry=RegistryClient(LoopbackRegistry(), timeout),
        router=RouterClient(LoopbackRouter(), timeout),
        payment_spawner=PaymentSpawnerClient(LoopbackPaymentSpawner(), timeout),
        payment_handler=PaymentHandlerClient(LoopbackPaymentHandler(), timeout),
        peer=PeerClient(LoopbackPeerConnector(), timeout),
    )
