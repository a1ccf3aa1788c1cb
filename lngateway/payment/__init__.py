"""Payment request encoding."""

from lngateway.payment.codec import (
    decode_payment_request,
    encode_payment_request,
    from_base64,
    to_base64,
)

__all__ = [
    "decode_payment_request",
    "encode_payment_request",
    "from_base64",
    "to_base64",
]
