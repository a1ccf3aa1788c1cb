"""CLI commands: run the gateway, or call a running one.

    lngateway serve [--config PATH] [--port N] [--verbose]
    lngateway call METHOD [PARAMS...] [--url URL]
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from lngateway.cli.output import print_error, print_info, print_json
from lngateway.client import ClientError, GatewayClient
from lngateway.config.loader import load_config
from lngateway.core.errors import GatewayError
from lngateway.rpc.bootstrap import bootstrap_gateway, configure_server_logging
from lngateway.rpc.http import run_http_server

# Load .env file if present
load_dotenv()


def parse_param(raw: str) -> Any:
    """Decode a CLI parameter as JSON, falling back to the raw string.

    ``42`` becomes an integer, ``"42"`` (quoted) and ``chan-1`` stay strings.
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


async def cmd_serve(
    config_path: Path | None = None,
    port: int | None = None,
    verbose: bool = False,
    log_dir: Path = Path(".lngateway/logs"),
) -> int:
    """Run the gateway until a shutdown call or Ctrl+C.

    Returns:
        Exit code: 0 on clean shutdown, 1 on configuration error.
    """
    try:
        config = load_config(config_path)
    except GatewayError as e:
        print_error(f"Configuration error: {e.message}")
        return 1

    effective_port = port if port is not None else config.server.port
    server_log_file = configure_server_logging(
        log_dir,
        level=getattr(logging, config.server.log_level),
        console_level=logging.DEBUG if verbose else logging.WARNING,
    )

    dispatcher = bootstrap_gateway(config)
    started_event = asyncio.Event()
    server_task = asyncio.create_task(
        run_http_server(
            dispatcher,
            port=effective_port,
            host=config.server.host,
            max_concurrent=config.server.max_concurrent,
            started_event=started_event,
        )
    )

    started_task = asyncio.create_task(started_event.wait())
    await asyncio.wait(
        {server_task, started_task}, timeout=5.0, return_when=asyncio.FIRST_COMPLETED
    )
    started_task.cancel()

    if server_task.done():
        # Bind failures surface through the task
        error = server_task.exception()
        print_error(f"Server failed to start: {error}")
        return 1
    if not started_event.is_set():
        print_error("Server failed to start (bind timeout)")
        server_task.cancel()
        return 1

    print_info(f"Gateway: http://{config.server.host}:{effective_port}/")
    print_info(f"Server log: {server_log_file}")
    print_info("Press Ctrl+C to stop")

    await server_task
    print_info("Shutdown requested, exiting")
    return 0


async def cmd_call(
    method: str,
    params: list[str],
    url: str | None = None,
    timeout: float = 60.0,
) -> int:
    """Send one call and print its result as JSON.

    Returns:
        Exit code: 0 on success, 1 on error.
    """
    decoded = [parse_param(p) for p in params]
    try:
        async with GatewayClient(url, timeout=timeout) as client:
            result = await client.call(method, *decoded)
    except ClientError as e:
        print_error(e.message)
        return 1
    print_json(result)
    return 0
