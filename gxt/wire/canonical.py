# gxt/wire/canonical.py
"""
GXT Canonical Encoder

The signable part of an envelope is a fixed-order CBOR array:

    ┌─────────┬──────────────────┬────────────────┬──────┬─────────┬────────┐
    │ version │ verification_key │ encryption_key │ kind │ payload │ parent │
    │  uint   │  hex text (32B)  │ hex text (32B) │ text │  any    │ hex/"" │
    └─────────┴──────────────────┴────────────────┴──────┴─────────┴────────┘

These bytes are both the content-hash preimage and (after DOMAIN_TAG)
the signature preimage. id and signature are never part of them.

Determinism rules:
  - Field order is fixed by the array, not by an encoder
  - Map keys inside the payload keep their insertion order
  - Byte fields are lower-case hex; absent parent is ""
  - Size ceiling (64 KiB, inclusive) is checked before any crypto
"""

from __future__ import annotations

import io
from enum import Enum
from typing import Any, Optional, Union

import cbor2

from ..common import (
    MAX_ENVELOPE_SIZE,
    PROTOCOL_VERSION,
    check_value,
    to_hex,
)
from ..errors import (
    InvalidEnvelopeError,
    SerializationError,
    TooLargeError,
    UnknownKindError,
)


# =============================================================================
# Enums
# =============================================================================

class PayloadKind(Enum):
    """What the payload of an envelope is. Part of the signed bytes."""

    ID = "Id"      # Identity card: public keys + metadata
    MSG = "Msg"    # Message (optionally encrypted to an id card)

    @classmethod
    def parse(cls, value: Any) -> "PayloadKind":
        """Parse the wire string, rejecting unknown kinds."""
        if not isinstance(value, str):
            raise InvalidEnvelopeError(f"kind must be text, got {type(value).__name__}")
        try:
            return cls(value)
        except ValueError as e:
            raise UnknownKindError(value) from e


# =============================================================================
# Structured Value Codec
# =============================================================================

def _encode(value: Any) -> bytes:
    try:
        return cbor2.dumps(value)
    except (cbor2.CBOREncodeError, ValueError, TypeError) as e:
        raise SerializationError(f"CBOR encoding failed: {e}") from e


def _decode(data: bytes) -> Any:
    fp = io.BytesIO(data)
    try:
        value = cbor2.CBORDecoder(fp).decode()
    except (cbor2.CBORDecodeError, RecursionError, ValueError, TypeError) as e:
        raise InvalidEnvelopeError(f"Malformed CBOR: {e}") from e

    if fp.tell() != len(data):
        raise InvalidEnvelopeError(f"Trailing bytes after CBOR item: {len(data) - fp.tell()}")
    return value


def _check_decoded(value: Any) -> None:
    try:
        check_value(value)
    except SerializationError as e:
        raise InvalidEnvelopeError(str(e)) from e


def dumps_value(value: Any) -> bytes:
    """
    Serialize a structured value to CBOR.

    Raises:
        SerializationError: value contains unsupported types
    """
    check_value(value)
    return _encode(value)


def loads_value(data: bytes) -> Any:
    """
    Parse exactly one CBOR item and validate it as a structured value.

    Raises:
        InvalidEnvelopeError: corrupt CBOR, trailing bytes, or unsupported types
    """
    value = _decode(data)
    _check_decoded(value)
    return value


def dumps_fields(fields: list) -> bytes:
    """
    Serialize an envelope array. Each field is validated on its own, so a
    payload's nesting depth is counted from the payload, not the array.
    """
    for field in fields:
        check_value(field)
    return _encode(fields)


def loads_fields(data: bytes) -> list:
    """Inverse of dumps_fields. Raises InvalidEnvelopeError if not an array."""
    value = _decode(data)
    if not isinstance(value, list):
        raise InvalidEnvelopeError(f"Envelope must be an array, got {type(value).__name__}")
    for field in value:
        _check_decoded(field)
    return value


def check_size(size: int, limit: int = MAX_ENVELOPE_SIZE) -> None:
    """Raise TooLargeError if size exceeds the inclusive limit."""
    if size > limit:
        raise TooLargeError(size, limit)


# =============================================================================
# Canonical Bytes
# =============================================================================

def signable_fields(
    verification_key: bytes,
    encryption_key: bytes,
    kind: Union[PayloadKind, str],
    payload: Any,
    parent: Optional[bytes],
    version: int = PROTOCOL_VERSION,
) -> list:
    """The six signable fields in wire order and wire encoding."""
    return [
        version,
        to_hex(verification_key),
        to_hex(encryption_key),
        PayloadKind(kind).value,
        payload,
        to_hex(parent) if parent is not None else "",
    ]


def canonical_bytes(
    verification_key: bytes,
    encryption_key: bytes,
    kind: Union[PayloadKind, str],
    payload: Any,
    parent: Optional[bytes] = None,
    version: int = PROTOCOL_VERSION,
) -> bytes:
    """
    Deterministic preimage for the content id and the signature.

    Raises:
        SerializationError: payload is not a structured value
        TooLargeError: encoding exceeds MAX_ENVELOPE_SIZE
    """
    data = dumps_fields(
        signable_fields(verification_key, encryption_key, kind, payload, parent, version)
    )
    check_size(len(data))
    return data
