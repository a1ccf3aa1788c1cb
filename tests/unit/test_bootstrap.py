"""Tests for gateway wiring and server logging."""

import logging

import pytest

from lngateway.config.schema import Config, NodeConfig
from lngateway.rpc.bootstrap import bootstrap_gateway, configure_server_logging


@pytest.fixture
def restore_gateway_logger():
    gateway_logger = logging.getLogger("lngateway")
    saved = (list(gateway_logger.handlers), gateway_logger.level, gateway_logger.propagate)
    yield
    for handler in list(gateway_logger.handlers):
        gateway_logger.removeHandler(handler)
        handler.close()
    handlers, level, propagate = saved
    for handler in handlers:
        gateway_logger.addHandler(handler)
    gateway_logger.setLevel(level)
    gateway_logger.propagate = propagate


class TestConfigureServerLogging:
    """Tests for configure_server_logging."""

    def test_writes_server_log(self, tmp_path, restore_gateway_logger):
        log_file = configure_server_logging(tmp_path / "logs")

        logging.getLogger("lngateway.rpc.http").info("hello from the test")
        for handler in logging.getLogger("lngateway").handlers:
            handler.flush()

        assert log_file == tmp_path / "logs" / "server.log"
        assert "hello from the test" in log_file.read_text(encoding="utf-8")

    def test_reconfigure_does_not_duplicate_handlers(self, tmp_path, restore_gateway_logger):
        configure_server_logging(tmp_path)
        configure_server_logging(tmp_path)

        assert len(logging.getLogger("lngateway").handlers) == 2


class TestBootstrapGateway:
    """Tests for bootstrap_gateway."""

    @pytest.mark.asyncio
    async def test_loopback_by_default(self):
        dispatcher = bootstrap_gateway(Config(node=NodeConfig(node_id="gw-node")))

        response = await dispatcher.dispatch_body(
            '{"id": "1", "method": "info", "params": []}'
        )

        assert response.result == {"node_id": "gw-node"}

    @pytest.mark.asyncio
    async def test_uses_given_collaborators(self, collaborators, peer):
        dispatcher = bootstrap_gateway(Config(), collaborators=collaborators)

        await dispatcher.dispatch_body(
            '{"id": "1", "method": "connect", "params": ["10.0.0.2", 9735, 10]}'
        )

        assert peer.connections == [("10.0.0.2", 9735, 10)]
