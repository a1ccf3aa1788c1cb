"""JSON-RPC gateway for the control surface of a payment-channel node."""

__version__ = "0.3.0"
