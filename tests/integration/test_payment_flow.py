"""Integration tests: a payee and a payer gateway exchanging a payment request."""

import asyncio
import json

import httpx
import pytest

from lngateway.backends.loopback import (
    LoopbackPaymentHandler,
    LoopbackPaymentSpawner,
    LoopbackPeerConnector,
    LoopbackRegistry,
    LoopbackRouter,
)
from lngateway.client import GatewayClient
from lngateway.config.schema import Config, NodeConfig, ServerConfig
from lngateway.core.types import ChannelDescriptor
from lngateway.rpc.bootstrap import bootstrap_gateway
from lngateway.rpc.collaborators import (
    PaymentHandlerClient,
    PaymentSpawnerClient,
    PeerClient,
    RegistryClient,
    RouterClient,
)
from lngateway.rpc.executor import Collaborators
from lngateway.rpc.http import handle_connection

PAYEE_KEY = "02c6047f9441ed7d6d3045406e95c07cd85c778e4b8cef3ca7abac09b95c709ee5"
PAYER_KEY = "02f9308a019258c31049344f85f89d5229b531c845836f99b08601f113bce036f9"


def _graph() -> list[ChannelDescriptor]:
    return [
        ChannelDescriptor(
            id=bytes(range(32)),
            node_a=bytes.fromhex(PAYER_KEY),
            node_b=bytes.fromhex(PAYEE_KEY),
        )
    ]


async def _serve(dispatcher) -> tuple[asyncio.AbstractServer, str]:
    server = await asyncio.start_server(
        lambda r, w: handle_connection(r, w, dispatcher), host="127.0.0.1", port=0
    )
    host, port = server.sockets[0].getsockname()[:2]
    return server, f"http://{host}:{port}/"


class TestPaymentFlow:
    """genpaymentrequest on one node, findroute and pay on another."""

    @pytest.mark.asyncio
    async def test_request_then_pay(self):
        payee_handler = LoopbackPaymentHandler()
        payee = bootstrap_gateway(
            Config(node=NodeConfig(public_key=PAYEE_KEY), server=ServerConfig(port=0)),
            collaborators=Collaborators(
                registry=RegistryClient(LoopbackRegistry()),
                router=RouterClient(LoopbackRouter(graph=_graph())),
                payment_spawner=PaymentSpawnerClient(LoopbackPaymentSpawner()),
                payment_handler=PaymentHandlerClient(payee_handler),
                peer=PeerClient(LoopbackPeerConnector()),
            ),
        )
        payer_spawner = LoopbackPaymentSpawner()
        payer = bootstrap_gateway(
            Config(node=NodeConfig(public_key=PAYER_KEY)),
            collaborators=Collaborators(
                registry=RegistryClient(LoopbackRegistry()),
                router=RouterClient(LoopbackRouter()),
                payment_spawner=PaymentSpawnerClient(payer_spawner),
                payment_handler=PaymentHandlerClient(LoopbackPaymentHandler()),
                peer=PeerClient(LoopbackPeerConnector()),
            ),
        )

        payee_server, payee_url = await _serve(payee)
        payer_server, payer_url = await _serve(payer)
        async with payee_server, payer_server:
            async with GatewayClient(payee_url) as payee_client:
                encoded = await payee_client.gen_payment_request(250_000)

            async with GatewayClient(payer_url) as payer_client:
                route = await payer_client.find_route(encoded)
                event = await payer_client.pay(encoded)

        assert route == {"route": [PAYEE_KEY]}
        assert event["status"] == "sent"
        payment_hash = bytes.fromhex(event["payment_hash"])
        assert payment_hash in payee_handler.preimages

        amount, sent_hash, node_id, table = payer_spawner.payments[0]
        assert amount == 250_000
        assert sent_hash == payment_hash
        assert node_id.hex() == PAYEE_KEY
        assert [c.id for c in table.channels] == [bytes(range(32))]

    @pytest.mark.asyncio
    async def test_corrupted_request_rejected(self):
        dispatcher = bootstrap_gateway(Config())
        server, url = await _serve(dispatcher)

        async with server, httpx.AsyncClient() as client:
            response = await client.post(
                url,
                content=json.dumps(
                    {"jsonrpc": "1.0", "id": "p1", "method": "pay", "params": ["@@@"]}
                ),
            )

        assert response.status_code == 500
        body = response.json()
        assert body["id"] == "p1"
        assert body["result"] is None
        assert "base64" in body["error"]["message"]
