"""Tests for CommandExecutor, including the two composed commands."""

import asyncio
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from lngateway.core.errors import (
    CollaboratorError,
    CommandTimeoutError,
    PaymentRequestError,
)
from lngateway.core.types import ChannelInfo, PaymentEvent, PaymentRequest, RouteResponse
from lngateway.payment.codec import from_base64, to_base64
from lngateway.rpc.collaborators import PaymentHandlerClient, RegistryClient, RouterClient
from lngateway.rpc.commands import (
    CloseChannel,
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
from lngateway.rpc.executor import HELP_TEXT, CommandExecutor


class TestSingleCallCommands:
    """Commands that make at most one collaborator call."""

    @pytest.mark.asyncio
    async def test_info(self, executor):
        assert await executor.execute(QueryNodeInfo()) == {"node_id": "node-under-test"}

    @pytest.mark.asyncio
    async def test_info_and_help_are_repeatable(self, executor):
        for command in (QueryNodeInfo(), RequestHelpText()):
            assert await executor.execute(command) == await executor.execute(command)

    @pytest.mark.asyncio
    async def test_help(self, executor):
        lines = await executor.execute(RequestHelpText())
        assert lines == list(HELP_TEXT)
        assert any(line.startswith("genpaymentrequest") for line in lines)

    @pytest.mark.asyncio
    async def test_connect(self, executor, peer):
        assert await executor.execute(ConnectToPeer("10.0.0.1", 9735, 50_000)) == "ok"
        assert peer.connections == [("10.0.0.1", 9735, 50_000)]

    @pytest.mark.asyncio
    async def test_network_and_beacons(self, executor, peer_key):
        assert len(await executor.execute(QueryNetworkGraph())) == 2
        assert await executor.execute(ListBeacons()) == [peer_key]

    @pytest.mark.asyncio
    async def test_flare_info(self, executor):
        info = await executor.execute(QueryFlareInfo())
        assert info.neighbors == 2
        assert info.known_nodes == 2

    @pytest.mark.asyncio
    async def test_genh(self, executor, payment_handler):
        payment_hash = await executor.execute(GeneratePaymentHash())
        assert len(payment_hash) == 32
        assert payment_hash in payment_handler.preimages

    @pytest.mark.asyncio
    async def test_addhtlc(self, executor, payment_spawner, peer_key):
        command = CreatePaymentByHash(amount=1000, payment_hash=b"\x11" * 32, node_id=peer_key)

        event = await executor.execute(command)

        assert event == PaymentEvent(status="sent", payment_hash=b"\x11" * 32)
        assert payment_spawner.payments == [(1000, b"\x11" * 32, peer_key, None)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "command",
        [
            SignChannel("chan-1"),
            FulfillHtlc("chan-1", 3, b"\x22" * 32),
            CloseChannel("chan-1", "0014ab"),
        ],
    )
    async def test_channel_commands_forwarded(self, executor, registry, command):
        assert await executor.execute(command) == "ok"
        channel = (await registry.list_channels())[0]
        assert channel.commands == [command]

    @pytest.mark.asyncio
    async def test_close_marks_channel_closing(self, executor, registry):
        await executor.execute(CloseChannel("chan-1"))
        channel = (await registry.list_channels())[0]
        assert channel.state == "CLOSING"

    @pytest.mark.asyncio
    async def test_unknown_channel_is_collaborator_error(self, executor):
        with pytest.raises(CollaboratorError, match="unknown channel chan-9"):
            await executor.execute(SignChannel("chan-9"))

    @pytest.mark.asyncio
    async def test_pay_invalid_request(self, executor, payment_spawner):
        with pytest.raises(PaymentRequestError):
            await executor.execute(CreatePaymentByEncodedRequest("!!!"))
        assert payment_spawner.payments == []

    @pytest.mark.asyncio
    async def test_findroute_invalid_request(self, executor):
        with pytest.raises(PaymentRequestError):
            await executor.execute(FindRoute("AAAA"))

    @pytest.mark.asyncio
    async def test_findroute(self, executor, node_key):
        encoded = to_base64(PaymentRequest(node_id=node_key, amount_msat=1, hash=b"\x44" * 32))
        assert await executor.execute(FindRoute(encoded)) == RouteResponse(route=(node_key,))

    @pytest.mark.asyncio
    async def test_shutdown_sets_event(self, executor):
        assert not executor.shutdown_requested
        assert await executor.execute(RequestShutdown()) == ""
        assert executor.shutdown_requested


class TestGeneratePaymentRequest:
    """Tests for the hash + network composition."""

    @pytest.mark.asyncio
    async def test_builds_decodable_request(self, executor, payment_handler, node_key):
        encoded = await executor.execute(GeneratePaymentRequest(1000))

        request = from_base64(encoded)
        assert request.node_id == node_key
        assert request.amount_msat == 1000
        assert request.hash in payment_handler.preimages
        assert len(request.routing_table.channels) == 2

    @pytest.mark.asyncio
    async def test_sub_calls_run_concurrently(self, collaborators, node):
        started: list[str] = []
        both_started = asyncio.Event()

        class Handler:
            async def generate_hash(self) -> bytes:
                started.append("hash")
                if len(started) == 2:
                    both_started.set()
                await both_started.wait()
                return b"\x33" * 32

        class Router:
            async def network(self):
                started.append("network")
                if len(started) == 2:
                    both_started.set()
                await both_started.wait()
                return []

        executor = CommandExecutor(
            replace(
                collaborators,
                router=RouterClient(Router(), timeout=1.0),
                payment_handler=PaymentHandlerClient(Handler(), timeout=1.0),
            ),
            node,
            request_timeout=1.0,
        )

        encoded = await executor.execute(GeneratePaymentRequest(5))

        assert sorted(started) == ["hash", "network"]
        assert from_base64(encoded).routing_table.channels == ()

    @pytest.mark.asyncio
    async def test_failing_sub_call_fails_command(self, collaborators, node):
        handler = AsyncMock()
        handler.generate_hash.side_effect = RuntimeError("no entropy")
        executor = CommandExecutor(
            replace(collaborators, payment_handler=PaymentHandlerClient(handler, timeout=1.0)),
            node,
        )

        with pytest.raises(CollaboratorError, match="payment_handler.generate_hash failed"):
            await executor.execute(GeneratePaymentRequest(1000))

    @pytest.mark.asyncio
    async def test_bad_hash_length(self, collaborators, node):
        handler = AsyncMock()
        handler.generate_hash.return_value = b"\x01" * 5
        executor = CommandExecutor(
            replace(collaborators, payment_handler=PaymentHandlerClient(handler, timeout=1.0)),
            node,
        )

        with pytest.raises(PaymentRequestError, match="32 bytes"):
            await executor.execute(GeneratePaymentRequest(1000))


class TestListChannels:
    """Tests for the list + per-channel info fan-out."""

    @pytest.mark.asyncio
    async def test_one_snapshot_per_channel(self, executor, peer_key):
        infos = await executor.execute(ListChannels())
        assert infos == [
            ChannelInfo(node_id=peer_key, channel_id="chan-1", state="NORMAL"),
            ChannelInfo(node_id=peer_key, channel_id="chan-2", state="OFFLINE"),
        ]

    @pytest.mark.asyncio
    async def test_no_channels(self, collaborators, node):
        backend = AsyncMock()
        backend.list_channels.return_value = []
        executor = CommandExecutor(
            replace(collaborators, registry=RegistryClient(backend, timeout=1.0)),
            node,
        )

        assert await executor.execute(ListChannels()) == []

    @pytest.mark.asyncio
    async def test_one_failing_channel_fails_command(self, collaborators, node):
        good = AsyncMock()
        good.get_info.return_value = "ok"
        bad = AsyncMock()
        bad.get_info.side_effect = RuntimeError("channel crashed")
        backend = AsyncMock()
        backend.list_channels.return_value = [good, bad]
        executor = CommandExecutor(
            replace(collaborators, registry=RegistryClient(backend, timeout=1.0)),
            node,
        )

        with pytest.raises(CollaboratorError, match="channel crashed"):
            await executor.execute(ListChannels())


class TestRequestTimeout:
    """The request-wide timeout bounds the whole command."""

    @pytest.mark.asyncio
    async def test_command_timeout(self, collaborators, node):
        class SlowRouter:
            async def network(self):
                await asyncio.sleep(10)

        executor = CommandExecutor(
            replace(collaborators, router=RouterClient(SlowRouter(), timeout=5.0)),
            node,
            request_timeout=0.05,
        )

        with pytest.raises(CommandTimeoutError, match="QueryNetworkGraph timed out after 0.05s"):
            await executor.execute(QueryNetworkGraph())
