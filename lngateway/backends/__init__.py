"""Collaborator backends that can be attached to the gateway."""

from lngateway.backends.loopback import (
    LoopbackChannel,
    LoopbackPaymentHandler,
    LoopbackPaymentSpawner,
    LoopbackPeerConnector,
    LoopbackRegistry,
    LoopbackRouter,
    UnknownChannelError,
    create_loopback_collaborators,
)

__all__ = [
    "LoopbackChannel",
    "LoopbackPaymentHandler",
    "LoopbackPaymentSpawner",
    "LoopbackPeerConnector",
    "LoopbackRegistry",
    "LoopbackRouter",
    "UnknownChannelError",
    "create_loopback_collaborators",
]
