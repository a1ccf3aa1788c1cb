"""Configuration loading and validation."""

from lngateway.config.loader import load_config
from lngateway.config.schema import Config, GatewayConfig, NodeConfig, ServerConfig

__all__ = [
    "Config",
    "GatewayConfig",
    "NodeConfig",
    "ServerConfig",
    "load_config",
]
