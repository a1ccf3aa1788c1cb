"""Command execution and asynchronous composition.

CommandExecutor runs one command against the collaborator adapters under a
single request-wide timeout. Most commands are one collaborator call whose
result is returned as-is; generate-payment-request and list-channels start
several calls at once and join them before producing a result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

from lngateway.core.errors import CommandTimeoutError, PaymentRequestError
from lngateway.core.types import NodeContext, PaymentRequest, RoutingTable
from lngateway.payment.codec import from_base64, to_base64
from lngateway.rpc.collaborators import (
    PaymentHandlerClient,
    PaymentSpawnerClient,
    PeerClient,
    RegistryClient,
    RouterClient,
)
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

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0

HELP_TEXT = (
    "info: display basic node information",
    "connect (host, port, anchor_amount): open a channel with another node",
    "list: list existing channels",
    "network: list the channels of the network graph",
    "beacons: list the router's beacons",
    "addhtlc (amount, rhash, nodeId): send an htlc",
    "pay (payment_request): pay a base64 payment request",
    "genh: generate a payment hash",
    "genpaymentrequest (amount): generate a base64 payment request",
    "findroute (payment_request): find a route to the payee of a payment request",
    "sign (channel_id): update the commitment transaction",
    "fulfillhtlc (channel_id, htlc_id, r): fulfill an htlc",
    "close (channel_id[, scriptPubKey]): close a channel",
    "flare_info: display router diagnostics",
    "help: display this message",
)

CommandHandler = Callable[[Any], Coroutine[Any, Any, Any]]


@dataclass(frozen=True)
class Collaborators:
    """The adapters a CommandExecutor talks to."""

    registry: RegistryClient
    router: RouterClient
    payment_spawner: PaymentSpawnerClient
    payment_handler: PaymentHandlerClient
    peer: PeerClient


class CommandExecutor:
    """Runs commands against the node collaborators.

    Attributes:
        shutdown_event: Set when a caller requests process shutdown. The
            owner of the executor (the server loop) decides what to do.

    Example:
        executor = CommandExecutor(collaborators, NodeContext("02ab...", key))
        result = await executor.execute(ListChannels())
    """

    def __init__(
        self,
        collaborators: Collaborators,
        node: NodeContext,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        shutdown_event: asyncio.Event | None = None,
    ) -> None:
        self._collaborators = collaborators
        self._node = node
        self._request_timeout = request_timeout
        self.shutdown_event = shutdown_event if shutdown_event is not None else asyncio.Event()
        self._handlers: dict[type, CommandHandler] = {
            ConnectToPeer: self._connect,
            QueryNodeInfo: self._info,
            ListChannels: self._list_channels,
            QueryNetworkGraph: self._network,
            ListBeacons: self._beacons,
            CreatePaymentByHash: self._add_htlc,
            CreatePaymentByEncodedRequest: self._pay,
            GeneratePaymentHash: self._generate_hash,
            GeneratePaymentRequest: self._generate_payment_request,
            FindRoute: self._find_route,
            SignChannel: self._send_channel_command,
            FulfillHtlc: self._send_channel_command,
            CloseChannel: self._send_channel_command,
            RequestHelpText: self._help,
            RequestShutdown: self._shutdown,
            QueryFlareInfo: self._flare_info,
        }

    @property
    def shutdown_requested(self) -> bool:
        return self.shutdown_event.is_set()

    async def execute(self, command: Command) -> Any:
        """Run a command, bounded by the request timeout.

        Raises:
            CommandTimeoutError: If the command (including every composed
                sub-call) does not finish in time.
            DispatchError: Any collaborator or decoding failure.
        """
        handler = self._handlers[type(command)]
        name = type(command).__name__
        logger.debug("Executing %s", name)
        try:
            return await asyncio.wait_for(handler(command), timeout=self._request_timeout)
        except TimeoutError:
            logger.warning("%s timed out after %ss", name, self._request_timeout)
            raise CommandTimeoutError(name, self._request_timeout) from None

    # === Single-call commands ===

    async def _connect(self, command: ConnectToPeer) -> str:
        await self._collaborators.peer.connect(command.host, command.port, command.amount)
        return "ok"

    async def _info(self, command: QueryNodeInfo) -> dict[str, str]:
        return {"node_id": self._node.node_id}

    async def _network(self, command: QueryNetworkGraph) -> Any:
        return await self._collaborators.router.network()

    async def _beacons(self, command: ListBeacons) -> Any:
        return await self._collaborators.router.beacons()

    async def _add_htlc(self, command: CreatePaymentByHash) -> Any:
        return await self._collaborators.payment_spawner.create_payment(
            command.amount, command.payment_hash, command.node_id, None
        )

    async def _pay(self, command: CreatePaymentByEncodedRequest) -> Any:
        request = from_base64(command.encoded)
        return await self._collaborators.payment_spawner.create_payment(
            request.amount_msat, request.hash, request.node_id, request.routing_table
        )

    async def _generate_hash(self, command: GeneratePaymentHash) -> bytes:
        return await self._collaborators.payment_handler.generate_hash()

    async def _find_route(self, command: FindRoute) -> Any:
        request = from_base64(command.encoded)
        return await self._collaborators.router.find_route(
            request.node_id, request.routing_table
        )

    async def _send_channel_command(self, command: SignChannel | FulfillHtlc | CloseChannel) -> str:
        await self._collaborators.registry.send_command(command.channel_id, command)
        return "ok"

    async def _help(self, command: RequestHelpText) -> list[str]:
        return list(HELP_TEXT)

    async def _shutdown(self, command: RequestShutdown) -> str:
        logger.warning("Shutdown requested over RPC")
        self.shutdown_event.set()
        return ""

    async def _flare_info(self, command: QueryFlareInfo) -> Any:
        return await self._collaborators.router.info()

    # === Compositions ===

    async def _generate_payment_request(self, command: GeneratePaymentRequest) -> str:
        # Both sub-calls start before either is awaited
        payment_hash, channels = await asyncio.gather(
            self._collaborators.payment_handler.generate_hash(),
            self._collaborators.router.network(),
        )
        try:
            request = PaymentRequest(
                node_id=self._node.public_key,
                amount_msat=command.amount,
                hash=payment_hash,
                routing_table=RoutingTable(channels=tuple(channels)),
            )
        except ValueError as e:
            raise PaymentRequestError(f"cannot build payment request: {e}") from e
        return to_base64(request)

    async def _list_channels(self, command: ListChannels) -> list[Any]:
        registry = self._collaborators.registry
        channels = await registry.list_channels()
        return list(await asyncio.gather(*(registry.channel_info(c) for c in channels)))
