"""Object graph bootstrap and logging setup for the gateway server.

Usage:
    configure_server_logging(Path(".lngateway/logs"))
    dispatcher = bootstrap_gateway(config)
    await run_http_server(dispatcher, port=config.server.port)
"""

from __future__ import annotations

import asyncio
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from lngateway.config.schema import Config
from lngateway.rpc.dispatcher import Dispatcher
from lngateway.rpc.executor import Collaborators, CommandExecutor

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_server_logging(
    log_dir: Path,
    level: int = logging.INFO,
    console_level: int = logging.WARNING,
) -> Path:
    """Configure file and console logging for the lngateway namespace.

    Logs are written to ``{log_dir}/server.log`` with automatic rotation
    (max 5MB per file, 3 backup files).

    Args:
        log_dir: Directory for server.log file. Created if doesn't exist.
        level: Logging level for file output (default INFO).
        console_level: Logging level for console output (default WARNING).

    Returns:
        Path to the server.log file.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "server.log"

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    gateway_logger = logging.getLogger("lngateway")
    gateway_logger.setLevel(min(level, console_level))

    # Remove any existing handlers to avoid duplicates on reconfigure
    for handler in list(gateway_logger.handlers):
        gateway_logger.removeHandler(handler)
        handler.close()

    gateway_logger.addHandler(file_handler)
    gateway_logger.addHandler(console_handler)
    gateway_logger.propagate = False

    logger.info("Server logging configured: %s", log_file)
    return log_file


def bootstrap_gateway(
    config: Config,
    collaborators: Collaborators | None = None,
    shutdown_event: asyncio.Event | None = None,
) -> Dispatcher:
    """Wire the executor and dispatcher for a loaded configuration.

    Args:
        config: Validated configuration.
        collaborators: Adapters for the node subsystems. Defaults to the
            in-process loopback set.
        shutdown_event: Event set when a shutdown command is acknowledged.

    Returns:
        The Dispatcher to hand to the HTTP front.
    """
    if collaborators is None:
        from lngateway.backends.loopback import create_loopback_collaborators

        logger.info("No node attached, using loopback collaborators")
        collaborators = create_loopback_collaborators(config.gateway.collaborator_timeout)

    node = config.node.to_context()
    executor = CommandExecutor(
        collaborators,
        node,
        request_timeout=config.gateway.request_timeout,
        shutdown_event=shutdown_event,
    )
    logger.info(
        "Gateway ready for node %s (request timeout %ss)",
        node.node_id,
        config.gateway.request_timeout,
    )
    return Dispatcher(executor)
