"""Core types and errors shared across lngateway."""

from lngateway.core.errors import (
    CollaboratorError,
    CollaboratorTimeoutError,
    CommandTimeoutError,
    ConfigError,
    DispatchError,
    GatewayError,
    InvalidParamsError,
    MethodNotFoundError,
    PaymentRequestError,
)
from lngateway.core.types import (
    ChannelDescriptor,
    ChannelInfo,
    FlareInfo,
    NodeContext,
    PaymentEvent,
    PaymentRequest,
    RouteResponse,
    RoutingTable,
)

__all__ = [
    # Errors
    "GatewayError",
    "ConfigError",
    "DispatchError",
    "MethodNotFoundError",
    "InvalidParamsError",
    "PaymentRequestError",
    "CollaboratorError",
    "CollaboratorTimeoutError",
    "CommandTimeoutError",
    # Types
    "ChannelDescriptor",
    "ChannelInfo",
    "FlareInfo",
    "NodeContext",
    "PaymentEvent",
    "PaymentRequest",
    "RouteResponse",
    "RoutingTable",
]
