# gxt/cryptography/keys.py
"""
GXT Key Derivation

One 32-byte Ed25519 secret governs both roles:

    secret ──Ed25519──────────────────────────────► verification_key (32B)
       │
       └─BLAKE3.derive_key("GXT-ENC-X25519-FROM-ED25519")
              │
              └─X25519 (clamped by the library)──► encryption keypair (32B/32B)

Derivation is a pure function of the secret. There is no independent
rotation of the encryption key.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Tuple, Union

import blake3
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from nacl.signing import SigningKey

from ..common import (
    ENCRYPTION_KEY_CONTEXT,
    SECRET_SIZE,
    coerce_key,
    to_hex,
)


@dataclass(frozen=True)
class DerivedKeys:
    """
    Public and private key material derived from one signing secret.

    Attributes:
        verification_key: Ed25519 public key (shareable)
        encryption_secret: X25519 secret (KEEP SECRET!)
        encryption_key: X25519 public key (shareable)
    """
    verification_key: bytes
    encryption_secret: bytes
    encryption_key: bytes

    def __repr__(self) -> str:
        return (
            f"DerivedKeys(verification_key={to_hex(self.verification_key)}, "
            f"encryption_key={to_hex(self.encryption_key)})"
        )


def make_key() -> str:
    """Generate a fresh random signing secret, returned as 64 hex chars."""
    return to_hex(secrets.token_bytes(SECRET_SIZE))


def derive_verification_key(secret: Union[bytes, str]) -> bytes:
    """Ed25519 public key for the signing secret."""
    sk = coerce_key(secret)
    return SigningKey(sk).verify_key.encode()


def derive_encryption_keypair(secret: Union[bytes, str]) -> Tuple[bytes, bytes]:
    """
    Derive the X25519 keypair from the signing secret.

    Returns:
        (x25519_secret, x25519_public), 32 bytes each
    """
    sk = coerce_key(secret)
    x_secret = blake3.blake3(sk, derive_key_context=ENCRYPTION_KEY_CONTEXT).digest()
    x_public = X25519PrivateKey.from_private_bytes(x_secret).public_key().public_bytes(
        Encoding.Raw, PublicFormat.Raw
    )
    return x_secret, x_public


def derive_keys(secret: Union[bytes, str]) -> DerivedKeys:
    """Derive all key material for a signing secret."""
    sk = coerce_key(secret)
    x_secret, x_public = derive_encryption_keypair(sk)
    return DerivedKeys(
        verification_key=derive_verification_key(sk),
        encryption_secret=x_secret,
        encryption_key=x_public,
    )
