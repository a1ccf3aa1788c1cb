"""Typed exception hierarchy for lngateway."""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for all lngateway errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(GatewayError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""



class DispatchError(GatewayError):
    """Base class for failures reported to callers in the JSON-RPC error envelope."""


class MethodNotFoundError(DispatchError):
    """Raised when no route accepts the method and parameter shape."""

    def __init__(self, message: str = "method not found") -> None:
        super().__init__(message)


class InvalidParamsError(DispatchError):
    """Raised when a parameter matched its route but its value cannot be decoded."""


class PaymentRequestError(DispatchError):
    """Raised when an encoded payment request cannot be decoded."""


class CollaboratorError(DispatchError):
    """Raised when a backend collaborator reports a failure."""

    def __init__(self, collaborator: str, operation: str, message: str) -> None:
        self.collaborator = collaborator
        self.operation = operation
        super().__init__(message)


class CollaboratorTimeoutError(CollaboratorError):
    """Raised when a collaborator does not answer within its bounded wait."""

    def __init__(self, collaborator: str, operation: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(
            collaborator,
            operation,
            f"{collaborator}.{operation} timed out after {timeout:g}s",
        )


class CommandTimeoutError(DispatchError):
    """Raised when a whole command exceeds the request-wide timeout."""

    def __init__(self, command: str, timeout: float) -> None:
        self.command = command
        self.timeout = timeout
        super().__init__(f"{command} timed out after {timeout:g}s")
