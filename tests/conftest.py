"""Shared pytest fixtures for the gateway tests."""

import hashlib

import pytest

from lngateway.backends.loopback import (
    LoopbackChannel,
    LoopbackPaymentHandler,
    LoopbackPaymentSpawner,
    LoopbackPeerConnector,
    LoopbackRegistry,
    LoopbackRouter,
)
from lngateway.core.types import ChannelDescriptor, NodeContext
from lngateway.rpc.collaborators import (
    PaymentHandlerClient,
    PaymentSpawnerClient,
    PeerClient,
    RegistryClient,
    RouterClient,
)
from lngateway.rpc.dispatcher import Dispatcher
from lngateway.rpc.executor import Collaborators, CommandExecutor

NODE_KEY = bytes.fromhex(
    "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
)
PEER_KEY = bytes.fromhex(
    "02c6047f9441ed7d6d3045406e95c07cd85c778e4b8cef3ca7abac09b95c709ee5"
)


def _descriptor(seed: str) -> ChannelDescriptor:
    return ChannelDescriptor(
        id=hashlib.sha256(seed.encode()).digest(),
        node_a=NODE_KEY,
        node_b=PEER_KEY,
    )


@pytest.fixture
def node() -> NodeContext:
    return NodeContext(node_id="node-under-test", public_key=NODE_KEY)


@pytest.fixture
def registry() -> LoopbackRegistry:
    return LoopbackRegistry([
        LoopbackChannel("chan-1", PEER_KEY),
        LoopbackChannel("chan-2", PEER_KEY, state="OFFLINE"),
    ])


@pytest.fixture
def router() -> LoopbackRouter:
    return LoopbackRouter(
        graph=[_descriptor("edge-1"), _descriptor("edge-2")],
        beacons=[PEER_KEY],
    )


@pytest.fixture
def payment_handler() -> LoopbackPaymentHandler:
    return LoopbackPaymentHandler()


@pytest.fixture
def payment_spawner() -> LoopbackPaymentSpawner:
    return LoopbackPaymentSpawner()


@pytest.fixture
def peer() -> LoopbackPeerConnector:
    return LoopbackPeerConnector()


@pytest.fixture
def collaborators(
    registry: LoopbackRegistry,
    router: LoopbackRouter,
    payment_handler: LoopbackPaymentHandler,
    payment_spawner: LoopbackPaymentSpawner,
    peer: LoopbackPeerConnector,
) -> Collaborators:
    return Collaborators(
        registry=RegistryClient(registry, timeout=1.0),
        router=RouterClient(router, timeout=1.0),
        payment_spawner=PaymentSpawnerClient(payment_spawner, timeout=1.0),
        payment_handler=PaymentHandlerClient(payment_handler, timeout=1.0),
        peer=PeerClient(peer, timeout=1.0),
    )


@pytest.fixture
def executor(collaborators: Collaborators, node: NodeContext) -> CommandExecutor:
    return CommandExecutor(collaborators, node, request_timeout=2.0)


@pytest.fixture
def dispatcher(executor: CommandExecutor) -> Dispatcher:
    return Dispatcher(executor)


@pytest.fixture
def node_key() -> bytes:
    return NODE_KEY


@pytest.fixture
def peer_key() -> bytes:
    return PEER_KEY
