"""Domain types exchanged between the gateway and node collaborators.

All dataclasses are frozen. Binary identifiers (hashes, public keys) are held
as raw ``bytes`` and rendered as lowercase hex when serialized to JSON.
"""

from dataclasses import dataclass, field
from typing import Any

HASH_SIZE = 32


@dataclass(frozen=True)
class NodeContext:
    """Read-only identity of the node this gateway fronts.

    Attributes:
        node_id: Node identifier reported by the ``info`` method.
        public_key: Node public key embedded in generated payment requests.
    """

    node_id: str
    public_key: bytes


@dataclass(frozen=True)
class ChannelDescriptor:
    """An edge of the network graph.

    Attributes:
        id: 32-byte channel identifier.
        node_a: Public key of the first endpoint.
        node_b: Public key of the second endpoint.
    """

    id: bytes
    node_a: bytes
    node_b: bytes

    def __post_init__(self) -> None:
        if len(self.id) != HASH_SIZE:
            raise ValueError(f"channel id must be {HASH_SIZE} bytes, got {len(self.id)}")


@dataclass(frozen=True)
class RoutingTable:
    """Set of channels a payer may use to reach the payee."""

    channels: tuple[ChannelDescriptor, ...] = ()


@dataclass(frozen=True)
class PaymentRequest:
    """Everything a payer needs to pay this node.

    Attributes:
        node_id: Public key of the payee.
        amount_msat: Amount requested, in millisatoshi.
        hash: 32-byte payment hash.
        routing_table: Channels known to the payee at request time.
    """

    node_id: bytes
    amount_msat: int
    hash: bytes
    routing_table: RoutingTable = field(default_factory=RoutingTable)

    def __post_init__(self) -> None:
        if len(self.hash) != HASH_SIZE:
            raise ValueError(f"payment hash must be {HASH_SIZE} bytes, got {len(self.hash)}")
        if self.amount_msat < 0:
            raise ValueError(f"amount_msat must be non-negative, got {self.amount_msat}")


@dataclass(frozen=True)
class ChannelInfo:
    """Snapshot of one channel as reported by the channel itself."""

    node_id: bytes
    channel_id: str
    state: str
    data: Any = None


@dataclass(frozen=True)
class PaymentEvent:
    """Outcome reported by the payment spawner."""

    status: str
    payment_hash: bytes
    channel_id: str | None = None
    detail: str | None = None


@dataclass(frozen=True)
class RouteResponse:
    """Route found by the router, as an ordered list of node public keys."""

    route: tuple[bytes, ...]


@dataclass(frozen=True)
class FlareInfo:
    """Router diagnostics."""

    neighbors: int
    known_nodes: int
