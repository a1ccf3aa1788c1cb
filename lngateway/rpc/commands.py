"""Command variants the dispatch table produces.

Each accepted JSON-RPC call becomes exactly one of these frozen dataclasses.
The channel commands (SignChannel, FulfillHtlc, CloseChannel) are also what
the registry forwards to the addressed channel.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ConnectToPeer:
    host: str
    port: int
    amount: int


@dataclass(frozen=True)
class QueryNodeInfo:
    pass


@dataclass(frozen=True)
class ListChannels:
    pass


@dataclass(frozen=True)
class QueryNetworkGraph:
    pass


@dataclass(frozen=True)
class ListBeacons:
    pass


@dataclass(frozen=True)
class CreatePaymentByHash:
    """Send an HTLC for a known payment hash to a destination node."""

    amount: int
    payment_hash: bytes
    node_id: bytes


@dataclass(frozen=True)
class CreatePaymentByEncodedRequest:
    """Pay a base64-encoded payment request."""

    encoded: str


@dataclass(frozen=True)
class GeneratePaymentHash:
    pass


@dataclass(frozen=True)
class GeneratePaymentRequest:
    amount: int


@dataclass(frozen=True)
class FindRoute:
    """Find a route to the payee of a base64-encoded payment request."""

    encoded: str


@dataclass(frozen=True)
class SignChannel:
    channel_id: str


@dataclass(frozen=True)
class FulfillHtlc:
    """Fulfill an HTLC with its preimage and commit immediately."""

    channel_id: str
    htlc_id: int
    preimage: bytes
    commit: bool = True


@dataclass(frozen=True)
class CloseChannel:
    """Close a channel, optionally paying out to ``script_pubkey``."""

    channel_id: str
    script_pubkey: str | None = None


@dataclass(frozen=True)
class RequestHelpText:
    pass


@dataclass(frozen=True)
class RequestShutdown:
    pass


@dataclass(frozen=True)
class QueryFlareInfo:
    pass


Command = (
    ConnectToPeer
    | QueryNodeInfo
    | ListChannels
    | QueryNetworkGraph
    | ListBeacons
    | CreatePaymentByHash
    | CreatePaymentByEncodedRequest
    | GeneratePaymentHash
    | GeneratePaymentRequest
    | FindRoute
    | SignChannel
    | FulfillHtlc
    | CloseChannel
    | RequestHelpText
    | RequestShutdown
    | QueryFlareInfo
)

ChannelCommand = SignChannel | FulfillHtlc | CloseChannel
