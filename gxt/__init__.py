# gxt/__init__.py
"""
GXT: Signed, Optionally Encrypted Tokens

- Ed25519 signatures with domain separation
- BLAKE3 content ids (tamper-evident addressing)
- X25519 + XChaCha20-Poly1305 payload encryption
- Compact text tokens: "gxt:" + base58(zstd(cbor))

Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │  gxt                                                    │
    │  ├── errors.py         # GxtError hierarchy             │
    │  ├── common.py         # Constants, Params, helpers     │
    │  ├── protocol.py       # Public operations              │
    │  │                                                      │
    │  ├── cryptography/     # Primitives                     │
    │  │   ├── keys.py       # Ed25519 → X25519 derivation    │
    │  │   ├── signing.py    # Content id + signature         │
    │  │   └── aead.py       # XChaCha20-Poly1305             │
    │  │                                                      │
    │  └── wire/             # Encoding                       │
    │      ├── canonical.py  # Signable bytes (CBOR)          │
    │      ├── envelope.py   # Envelope (8-element array)     │
    │      └── token.py      # zstd + base58 + prefix         │
    └─────────────────────────────────────────────────────────┘

Example:
    >>> import gxt
    >>> bob = gxt.make_key()
    >>> card = gxt.make_id_card(bob, {"name": "Bob"})
    >>> gxt.verify_message(card).payload
    {'name': 'Bob'}
"""

__version__ = "1.0.0"

# =============================================================================
# Errors
# =============================================================================

from .errors import (
    GxtError,
    BadPrefixError,
    DecodeError,
    CompressionError,
    TooLargeError,
    InvalidEnvelopeError,
    UnsupportedVersionError,
    UnknownKindError,
    SerializationError,
    HexDecodeError,
    HexLengthError,
    BadIdError,
    BadSignatureError,
    AccessDeniedError,
    EncryptionError,
)

# =============================================================================
# Constants
# =============================================================================

from .common import (
    PROTOCOL_VERSION,
    TOKEN_PREFIX,
    MAX_ENVELOPE_SIZE,
    MAX_WIRE_SIZE,
    DOMAIN_TAG,
    AEAD_ALGORITHM,
    Params,
    DEFAULT_PARAMS,
)

# =============================================================================
# Cryptography
# =============================================================================

from .cryptography.keys import (
    DerivedKeys,
    derive_verification_key,
    derive_encryption_keypair,
    derive_keys,
)

# =============================================================================
# Wire Format
# =============================================================================

from .wire.canonical import PayloadKind, canonical_bytes
from .wire.envelope import Envelope
from .wire.token import encode_token, decode_token

# =============================================================================
# Public Operations
# =============================================================================

from .protocol import (
    make_key,
    make_id_card,
    verify_message,
    verify,
    encrypt_message,
    decrypt_message,
)

# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Version
    "__version__",

    # -------------------------------------------------------------------------
    # Public Operations
    # -------------------------------------------------------------------------
    "make_key",
    "make_id_card",
    "verify_message",
    "verify",
    "encrypt_message",
    "decrypt_message",

    # -------------------------------------------------------------------------
    # Wire Format
    # -------------------------------------------------------------------------
    "Envelope",
    "PayloadKind",
    "canonical_bytes",
    "encode_token",
    "decode_token",

    # -------------------------------------------------------------------------
    # Key Derivation
    # -------------------------------------------------------------------------
    "DerivedKeys",
    "derive_verification_key",
    "derive_encryption_keypair",
    "derive_keys",

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------
    "GxtError",
    "BadPrefixError",
    "DecodeError",
    "CompressionError",
    "TooLargeError",
    "InvalidEnvelopeError",
    "UnsupportedVersionError",
    "UnknownKindError",
    "SerializationError",
    "HexDecodeError",
    "HexLengthError",
    "BadIdError",
    "BadSignatureError",
    "AccessDeniedError",
    "EncryptionError",

    # -------------------------------------------------------------------------
    # Constants
    # -------------------------------------------------------------------------
    "PROTOCOL_VERSION",
    "TOKEN_PREFIX",
    "MAX_ENVELOPE_SIZE",
    "MAX_WIRE_SIZE",
    "DOMAIN_TAG",
    "AEAD_ALGORITHM",
    "Params",
    "DEFAULT_PARAMS",
]


# =============================================================================
# Quick Status Check
# =============================================================================

def status() -> dict:
    """
    Get version and active protocol parameters.

    Example:
        >>> import gxt
        >>> gxt.status()
        {
            'version': '1.0.0',
            'protocol_version': 1,
            'prefix': 'gxt:',
            'max_size': 65536,
            ...
        }
    """
    return {
        'version': __version__,
        'protocol_version': DEFAULT_PARAMS.version,
        'prefix': DEFAULT_PARAMS.prefix,
        'max_size': DEFAULT_PARAMS.max_size,
        'max_wire_size': DEFAULT_PARAMS.max_wire_size,
        'domain_tag': DEFAULT_PARAMS.domain_tag.decode("ascii"),
        'aead': DEFAULT_PARAMS.aead,
        'compression': f"zstd-{DEFAULT_PARAMS.compression_level}",
    }
