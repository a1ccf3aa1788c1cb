"""Binary codec for payment requests.

Payment requests travel inside JSON-RPC string parameters as standard base64
of a protocol-buffer encoded structure:

    payment_request { node_id = 1 (bitcoin_pubkey), amount_msat = 2 (uint64),
                      hash = 3 (sha256_hash), routing_table = 4 }
    bitcoin_pubkey  { key = 1 (bytes) }
    sha256_hash     { a = 1, b = 2, c = 3, d = 4 (fixed64) }
    routing_table   { channels = 1 (repeated channel_desc) }
    channel_desc    { id = 1 (sha256_hash), nodeA = 2, nodeB = 3 (bitcoin_pubkey) }

A 32-byte hash is split into four 8-byte words, each read and written
little-endian, so the hash bytes appear unchanged on the wire.
"""

from __future__ import annotations

import base64
import binascii
import struct
from collections.abc import Iterator
from typing import Any

from lngateway.core.errors import PaymentRequestError
from lngateway.core.types import (
    HASH_SIZE,
    ChannelDescriptor,
    PaymentRequest,
    RoutingTable,
)

# Wire types
WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH_DELIMITED = 2
WIRE_FIXED32 = 5

MAX_UINT64 = (1 << 64) - 1


def write_varint(n: int) -> bytes:
    """Encode a non-negative integer as a base-128 varint."""
    if n < 0 or n > MAX_UINT64:
        raise ValueError(f"varint out of range: {n}")
    out = bytearray()
    while True:
        byte = n & 0x7F
        n >>= 7
        if n:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def read_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint at ``offset``.

    Returns:
        Tuple of (value, offset after the varint).

    Raises:
        PaymentRequestError: If the varint is truncated or longer than 10 bytes.
    """
    result = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise PaymentRequestError("truncated varint")
        byte = data[offset]
        offset += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            break
        shift += 7
        if shift >= 70:
            raise PaymentRequestError("varint too long")
    if result > MAX_UINT64:
        raise PaymentRequestError("varint exceeds 64 bits")
    return result, offset


def _key(field_number: int, wire_type: int) -> bytes:
    return write_varint((field_number << 3) | wire_type)


def _length_delimited(field_number: int, payload: bytes) -> bytes:
    return _key(field_number, WIRE_LENGTH_DELIMITED) + write_varint(len(payload)) + payload


def _iter_fields(data: bytes) -> Iterator[tuple[int, int, Any]]:
    """Yield (field_number, wire_type, value) for every field in a message."""
    offset = 0
    while offset < len(data):
        key, offset = read_varint(data, offset)
        field_number, wire_type = key >> 3, key & 0x07
        if field_number == 0:
            raise PaymentRequestError("invalid field number 0")

        if wire_type == WIRE_VARINT:
            value, offset = read_varint(data, offset)
        elif wire_type == WIRE_FIXED64:
            if offset + 8 > len(data):
                raise PaymentRequestError("truncated fixed64 field")
            value = struct.unpack_from("<Q", data, offset)[0]
            offset += 8
        elif wire_type == WIRE_LENGTH_DELIMITED:
            length, offset = read_varint(data, offset)
            if offset + length > len(data):
                raise PaymentRequestError(
                    f"truncated field {field_number}: need {length} bytes, "
                    f"have {len(data) - offset}"
                )
            value = data[offset:offset + length]
            offset += length
        elif wire_type == WIRE_FIXED32:
            if offset + 4 > len(data):
                raise PaymentRequestError("truncated fixed32 field")
            value = struct.unpack_from("<I", data, offset)[0]
            offset += 4
        else:
            raise PaymentRequestError(f"unsupported wire type {wire_type}")

        yield field_number, wire_type, value


def _collect(data: bytes) -> dict[int, list[tuple[int, Any]]]:
    fields: dict[int, list[tuple[int, Any]]] = {}
    for field_number, wire_type, value in _iter_fields(data):
        fields.setdefault(field_number, []).append((wire_type, value))
    return fields


def _required(
    fields: dict[int, list[tuple[int, Any]]],
    field_number: int,
    wire_type: int,
    name: str,
) -> Any:
    """Return the last occurrence of a required field, checking its wire type."""
    occurrences = fields.get(field_number)
    if not occurrences:
        raise PaymentRequestError(f"missing required field {name}")
    actual_type, value = occurrences[-1]
    if actual_type != wire_type:
        raise PaymentRequestError(
            f"field {name} has wire type {actual_type}, expected {wire_type}"
        )
    return value


# === Encoding ===


def _encode_pubkey(key: bytes) -> bytes:
    return _length_delimited(1, key)


def _encode_sha256(digest: bytes) -> bytes:
    if len(digest) != HASH_SIZE:
        raise ValueError(f"hash must be {HASH_SIZE} bytes, got {len(digest)}")
    words = struct.unpack("<4Q", digest)
    return b"".join(
        _key(i, WIRE_FIXED64) + struct.pack("<Q", word)
        for i, word in enumerate(words, start=1)
    )


def _encode_channel(channel: ChannelDescriptor) -> bytes:
    return (
        _length_delimited(1, _encode_sha256(channel.id))
        + _length_delimited(2, _encode_pubkey(channel.node_a))
        + _length_delimited(3, _encode_pubkey(channel.node_b))
    )


def _encode_routing_table(table: RoutingTable) -> bytes:
    return b"".join(_length_delimited(1, _encode_channel(c)) for c in table.channels)


def encode_payment_request(request: PaymentRequest) -> bytes:
    """Serialize a payment request to its binary form."""
    return (
        _length_delimited(1, _encode_pubkey(request.node_id))
        + _key(2, WIRE_VARINT)
        + write_varint(request.amount_msat)
        + _length_delimited(3, _encode_sha256(request.hash))
        + _length_delimited(4, _encode_routing_table(request.routing_table))
    )


# === Decoding ===


def _decode_pubkey(data: bytes) -> bytes:
    fields = _collect(data)
    return bytes(_required(fields, 1, WIRE_LENGTH_DELIMITED, "bitcoin_pubkey.key"))


def _decode_sha256(data: bytes) -> bytes:
    fields = _collect(data)
    words = [
        _required(fields, number, WIRE_FIXED64, f"sha256_hash.{name}")
        for number, name in enumerate("abcd", start=1)
    ]
    return struct.pack("<4Q", *words)


def _decode_channel(data: bytes) -> ChannelDescriptor:
    fields = _collect(data)
    return ChannelDescriptor(
        id=_decode_sha256(_required(fields, 1, WIRE_LENGTH_DELIMITED, "channel_desc.id")),
        node_a=_decode_pubkey(_required(fields, 2, WIRE_LENGTH_DELIMITED, "channel_desc.nodeA")),
        node_b=_decode_pubkey(_required(fields, 3, WIRE_LENGTH_DELIMITED, "channel_desc.nodeB")),
    )


def _decode_routing_table(data: bytes) -> RoutingTable:
    channels = []
    for wire_type, value in _collect(data).get(1, []):
        if wire_type != WIRE_LENGTH_DELIMITED:
            raise PaymentRequestError("routing_table.channels must be length-delimited")
        channels.append(_decode_channel(value))
    return RoutingTable(channels=tuple(channels))


def decode_payment_request(data: bytes) -> PaymentRequest:
    """Parse the binary form of a payment request.

    Unknown fields are skipped.

    Raises:
        PaymentRequestError: If the data is truncated, malformed, or lacks a
            required field.
    """
    fields = _collect(data)
    try:
        return PaymentRequest(
            node_id=_decode_pubkey(
                _required(fields, 1, WIRE_LENGTH_DELIMITED, "payment_request.node_id")
            ),
            amount_msat=_required(fields, 2, WIRE_VARINT, "payment_request.amount_msat"),
            hash=_decode_sha256(
                _required(fields, 3, WIRE_LENGTH_DELIMITED, "payment_request.hash")
            ),
            routing_table=_decode_routing_table(
                _required(fields, 4, WIRE_LENGTH_DELIMITED, "payment_request.routing_table")
            ),
        )
    except ValueError as e:
        raise PaymentRequestError(f"invalid payment request: {e}") from e


def to_base64(request: PaymentRequest) -> str:
    """Encode a payment request as base64 text."""
    return base64.b64encode(encode_payment_request(request)).decode("ascii")


def from_base64(text: str) -> PaymentRequest:
    """Decode a payment request from base64 text.

    Raises:
        PaymentRequestError: If the text is not valid base64 or the decoded
            bytes are not a valid payment request.
    """
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise PaymentRequestError(f"invalid base64 payment request: {e}") from e
    return decode_payment_request(raw)
