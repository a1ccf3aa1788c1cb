"""Pydantic models for lngateway configuration validation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lngateway.core.types import NodeContext

# Compressed secp256k1 generator point, used when no node key is configured
DEFAULT_PUBLIC_KEY = "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"


class NodeConfig(BaseModel):
    """Identity of the node behind the gateway.

    Example in config.json:
        "node": {
            "public_key": "02...",
            "node_id": "02..."
        }
    """

    model_config = ConfigDict(extra="forbid")

    public_key: str = DEFAULT_PUBLIC_KEY
    """Hex-encoded node public key, embedded in generated payment requests."""

    node_id: str | None = None
    """Identifier returned by the info method. Defaults to the public key."""

    @field_validator("public_key")
    @classmethod
    def validate_public_key(cls, v: str) -> str:
        try:
            key = bytes.fromhex(v)
        except ValueError as e:
            raise ValueError(f"public_key must be hex: {e}") from e
        if not key:
            raise ValueError("public_key must not be empty")
        return v.lower()

    def to_context(self) -> NodeContext:
        """Build the read-only node identity handed to the executor."""
        return NodeContext(
            node_id=self.node_id or self.public_key,
            public_key=bytes.fromhex(self.public_key),
        )


class ServerConfig(BaseModel):
    """Configuration for the HTTP front.

    Example in config.json:
        "server": {
            "host": "127.0.0.1",
            "port": 8080,
            "log_level": "INFO"
        }
    """

    model_config = ConfigDict(extra="forbid")

    host: str = "127.0.0.1"
    """Host address to bind to."""

    port: int = Field(default=8080, ge=0, le=65535)
    """Port number for the HTTP server (0 picks a free port)."""

    max_concurrent: int = Field(default=32, ge=1)
    """Maximum connections handled at once."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    """Logging level for the server log file."""


class GatewayConfig(BaseModel):
    """Timeouts applied to dispatched commands."""

    model_config = ConfigDict(extra="forbid")

    request_timeout: float = Field(default=30.0, gt=0)
    """Seconds a command may take, including every composed sub-call."""

    collaborator_timeout: float = Field(default=30.0, gt=0)
    """Seconds a single collaborator call may take."""


class Config(BaseModel):
    """Root configuration model.

    Example config.json:
        {
            "node": {"public_key": "02..."},
            "server": {"port": 8080},
            "gateway": {"request_timeout": 30.0}
        }
    """

    model_config = ConfigDict(extra="forbid")

    node: NodeConfig = NodeConfig()
    server: ServerConfig = ServerConfig()
    gateway: GatewayConfig = GatewayConfig()
