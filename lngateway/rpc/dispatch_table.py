"""Ordered route table mapping (method, parameter shape) to a command.

Routes are evaluated top to bottom and the first route whose method and
parameter shape both match builds the command. Adding a method means adding
a Route entry; nothing else in the dispatch path changes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from lngateway.core.errors import InvalidParamsError, MethodNotFoundError
from lngateway.rpc.commands import (
    CloseChannel,
    Command,
    ConnectToPeer,
    CreatePaymentByEncodedRequest,
    CreatePaymentByHash,
    FindRoute,
    FulfillHtlc,
    GeneratePaymentHash,
    GeneratePaymentRequest,
    ListBeacons,
    ListChannels,
    QueryFlareInfo,
    QueryNetworkGraph,
    QueryNodeInfo,
    RequestHelpText,
    RequestShutdown,
    SignChannel,
)


class ParamKind(Enum):
    """JSON type a positional parameter must have."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"

    def matches(self, value: Any) -> bool:
        # bool is an int subclass but never a JSON number
        if isinstance(value, bool):
            return False
        if self is ParamKind.STRING:
            return isinstance(value, str)
        if self is ParamKind.INTEGER:
            return isinstance(value, int)
        return isinstance(value, (int, float))

    def overlaps(self, other: ParamKind) -> bool:
        if self is other:
            return True
        return {self, other} == {ParamKind.INTEGER, ParamKind.NUMBER}


STRING = ParamKind.STRING
INTEGER = ParamKind.INTEGER
NUMBER = ParamKind.NUMBER


@dataclass(frozen=True)
class Route:
    """One row of the dispatch table.

    Attributes:
        method: JSON-RPC method name.
        shape: Required parameter kinds in order, or None to accept (and
            ignore) any parameters.
        build: Builds the command. Called with the positional parameters when
            ``shape`` is set, with no arguments otherwise.
    """

    method: str
    shape: tuple[ParamKind, ...] | None
    build: Callable[..., Command]

    def matches(self, method: str, params: Sequence[Any]) -> bool:
        if method != self.method:
            return False
        if self.shape is None:
            return True
        if len(params) != len(self.shape):
            return False
        return all(kind.matches(value) for kind, value in zip(self.shape, params))

    def overlaps(self, other: Route) -> bool:
        """True if some (method, params) pair would match both routes."""
        if self.method != other.method:
            return False
        if self.shape is None or other.shape is None:
            return True
        if len(self.shape) != len(other.shape):
            return False
        return all(a.overlaps(b) for a, b in zip(self.shape, other.shape))


def _hex(value: str, name: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise InvalidParamsError(f"{name} must be hex: {e}") from e


def _htlc_id(value: int | float) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise InvalidParamsError(f"htlc id must be a whole number, got {value}")
    return int(value)


def _build_add_htlc(amount: int, rhash: str, node_id: str) -> CreatePaymentByHash:
    return CreatePaymentByHash(
        amount=amount,
        payment_hash=_hex(rhash, "rhash"),
        node_id=_hex(node_id, "nodeId"),
    )


def _build_fulfill_htlc(channel_id: str, htlc_id: int | float, preimage: str) -> FulfillHtlc:
    return FulfillHtlc(
        channel_id=channel_id,
        htlc_id=_htlc_id(htlc_id),
        preimage=_hex(preimage, "preimage"),
    )


ROUTES: tuple[Route, ...] = (
    Route("connect", (STRING, INTEGER, INTEGER), ConnectToPeer),
    Route("info", None, QueryNodeInfo),
    Route("list", None, ListChannels),
    Route("network", None, QueryNetworkGraph),
    Route("beacons", None, ListBeacons),
    Route("addhtlc", (INTEGER, STRING, STRING), _build_add_htlc),
    Route("pay", (STRING,), CreatePaymentByEncodedRequest),
    Route("genh", None, GeneratePaymentHash),
    Route("genpaymentrequest", (INTEGER,), GeneratePaymentRequest),
    Route("findroute", (STRING,), FindRoute),
    Route("sign", (STRING,), SignChannel),
    Route("fulfillhtlc", (STRING, NUMBER, STRING), _build_fulfill_htlc),
    Route("close", (STRING, STRING), CloseChannel),
    Route("close", (STRING,), CloseChannel),
    Route("help", None, RequestHelpText),
    Route("suicide", None, RequestShutdown),
    Route("flare_info", None, QueryFlareInfo),
)


def check_routes(routes: Sequence[Route]) -> None:
    """Reject tables where two routes could accept the same call.

    Raises:
        ValueError: If any two routes overlap.
    """
    for i, first in enumerate(routes):
        for second in routes[i + 1:]:
            if first.overlaps(second):
                raise ValueError(
                    f"Routes for '{first.method}' overlap: {first.shape} and {second.shape}"
                )


def match_command(
    method: str,
    params: Sequence[Any],
    routes: Sequence[Route] = ROUTES,
) -> Command:
    """Build the command for the first route accepting (method, params).

    Raises:
        MethodNotFoundError: If no route matches.
        InvalidParamsError: If a matched parameter cannot be decoded.
    """
    for route in routes:
        if route.matches(method, params):
            if route.shape is None:
                return route.build()
            return route.build(*params)
    raise MethodNotFoundError()


check_routes(ROUTES)
