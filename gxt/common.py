# gxt/common.py
"""
GXT Common Components

Shared constants, parameter set, and small helpers used by every layer
of the token engine.

Encoding rules:
  - All byte fields travel as lower-case hex text inside the CBOR array
  - Absent parent is the empty string "", never null and never omitted
  - Secrets enter as 32 raw bytes or 64 hex characters
"""

from __future__ import annotations

import binascii
import hmac
from dataclasses import dataclass
from typing import Any, Optional, Union

from .errors import HexDecodeError, HexLengthError, SerializationError


# =============================================================================
# Constants
# =============================================================================

PROTOCOL_VERSION: int = 1
TOKEN_PREFIX: str = "gxt:"

MAX_ENVELOPE_SIZE: int = 64 * 1024  # 65536, inclusive

# id (2 + 64) and signature (2 + 128) as CBOR text, appended to the canonical array
WIRE_OVERHEAD: int = 196
MAX_WIRE_SIZE: int = MAX_ENVELOPE_SIZE + WIRE_OVERHEAD

# Ed25519 signatures cover DOMAIN_TAG || canonical
DOMAIN_TAG: bytes = b"GXT-SIG-V1"

# BLAKE3 derive_key contexts (must differ from each other)
ENCRYPTION_KEY_CONTEXT: str = "GXT-ENC-X25519-FROM-ED25519"
SYMMETRIC_KEY_CONTEXT: str = "GXT-ENC-XCHACHA20POLY1305"

AEAD_ALGORITHM: str = "XChaCha20Poly1305"

SECRET_SIZE: int = 32
PUBLIC_KEY_SIZE: int = 32
ID_SIZE: int = 32
SIGNATURE_SIZE: int = 64
NONCE_SIZE: int = 24
TAG_SIZE: int = 16

COMPRESSION_LEVEL: int = 19
MAX_NESTING: int = 128


@dataclass(frozen=True)
class Params:
    """Protocol parameter set reported by gxt.status()."""
    version: int
    prefix: str
    max_size: int
    max_wire_size: int
    domain_tag: bytes
    aead: str
    compression_level: int


DEFAULT_PARAMS = Params(
    version=PROTOCOL_VERSION,
    prefix=TOKEN_PREFIX,
    max_size=MAX_ENVELOPE_SIZE,
    max_wire_size=MAX_WIRE_SIZE,
    domain_tag=DOMAIN_TAG,
    aead=AEAD_ALGORITHM,
    compression_level=COMPRESSION_LEVEL,
)


# =============================================================================
# Utility Functions
# =============================================================================

def _ct_eq(a: bytes, b: bytes) -> bool:
    """
    Constant-time byte comparison.

    Note: Length check is not constant-time; callers compare values
    that are fixed-size by construction (ids, public keys).
    """
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a, b)


def to_hex(data: bytes) -> str:
    """Lower-case hex, the only byte encoding used on the wire."""
    return bytes(data).hex()


def from_hex(text: Any, field: str, size: Optional[int] = None) -> bytes:
    """
    Decode a hex field with input validation.

    Args:
        text: Hex string
        field: Field name used in error messages
        size: Required decoded length (None = any)

    Raises:
        HexDecodeError: Not a string, odd length, or non-hex characters
        HexLengthError: Decoded length differs from size
    """
    if not isinstance(text, str):
        raise HexDecodeError(field, f"expected str, got {type(text).__name__}")
    try:
        raw = binascii.unhexlify(text)
    except (binascii.Error, ValueError) as e:
        raise HexDecodeError(field, str(e)) from e
    if size is not None and len(raw) != size:
        raise HexLengthError(field, size, len(raw))
    return raw


def coerce_key(value: Union[bytes, bytearray, str], field: str = "secret",
               size: int = SECRET_SIZE) -> bytes:
    """Accept raw bytes or hex text (whitespace-trimmed) for key material."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) != size:
            raise HexLengthError(field, size, len(raw))
        return raw
    if isinstance(value, str):
        return from_hex(value.strip(), field, size)
    raise HexDecodeError(field, f"expected bytes or hex str, got {type(value).__name__}")


def coerce_parent(parent: Union[None, bytes, str]) -> Optional[bytes]:
    """Parent reference: None, 32 raw bytes, or 64 hex characters."""
    if parent is None:
        return None
    return coerce_key(parent, field="parent", size=ID_SIZE)


# =============================================================================
# Structured Values
# =============================================================================

_SCALARS = (type(None), bool, int, float, str, bytes)


def check_value(value: Any, depth: int = 0) -> None:
    """
    Validate a structured value tree.

    Allowed: None, bool, int, float, str, bytes, list, dict with
    str or int keys. Raises SerializationError on anything else; the
    decoder translates this into InvalidEnvelopeError.
    """
    if depth > MAX_NESTING:
        raise SerializationError(f"Value nested deeper than {MAX_NESTING} levels")

    if isinstance(value, _SCALARS):
        return
    if isinstance(value, list):
        for item in value:
            check_value(item, depth + 1)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if isinstance(key, bool) or not isinstance(key, (str, int)):
                raise SerializationError(f"Unsupported map key type: {type(key).__name__}")
            check_value(item, depth + 1)
        return
    raise SerializationError(f"Unsupported value type: {type(value).__name__}")
