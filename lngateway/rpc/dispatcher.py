"""JSON-RPC dispatcher for the gateway endpoint.

The dispatcher owns the request pipeline between the HTTP front and the
executor:

- Parse the body into a Request
- Match (method, params) against the route table
- Execute the command
- Wrap the result or failure in a response envelope

Every failure, whatever its origin, is converted here into the same
``{"code": -1, "message": ...}`` error object.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from lngateway.core.errors import DispatchError
from lngateway.rpc.dispatch_table import ROUTES, Route, match_command
from lngateway.rpc.executor import CommandExecutor
from lngateway.rpc.protocol import (
    ParseError,
    make_error_response,
    make_success_response,
    parse_request,
    to_jsonable,
)
from lngateway.rpc.types import Request, Response

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes JSON-RPC calls to the command executor.

    Example:
        dispatcher = Dispatcher(executor)
        response = await dispatcher.dispatch_body('{"id":"1","method":"info","params":[]}')
    """

    def __init__(
        self,
        executor: CommandExecutor,
        routes: Sequence[Route] = ROUTES,
    ) -> None:
        self._executor = executor
        self._routes = routes

    @property
    def shutdown_requested(self) -> bool:
        """True once a shutdown command has been acknowledged."""
        return self._executor.shutdown_requested

    async def dispatch_body(self, body: str) -> Response:
        """Parse and dispatch a raw request body.

        Parse failures are returned as error responses; the id is echoed
        when it could be read before parsing failed.
        """
        try:
            request = parse_request(body)
        except ParseError as e:
            logger.debug("Rejected request body: %s", e.message)
            return make_error_response(e.request_id, e.message)
        return await self.dispatch(request)

    async def dispatch(self, request: Request) -> Response:
        """Dispatch a parsed request.

        Returns:
            A Response carrying either ``result`` or ``error``.
        """
        logger.debug("Dispatching method '%s' (id=%r)", request.method, request.id)
        try:
            command = match_command(request.method, request.params, self._routes)
            result = await self._executor.execute(command)
            return make_success_response(request.id, to_jsonable(result))

        except DispatchError as e:
            logger.debug("Method '%s' failed: %s", request.method, e.message)
            return make_error_response(request.id, e.message)

        except Exception as e:
            logger.error(
                "Unexpected error dispatching method '%s': %s",
                request.method,
                e,
                exc_info=True,
            )
            return make_error_response(
                request.id,
                f"Internal error: {type(e).__name__}: {e}",
            )
