# gxt/cryptography/__init__.py
"""
GXT Cryptography Module

One Ed25519 secret, two roles:
  - Signing: Ed25519 over DOMAIN_TAG || canonical bytes
  - Encryption: X25519 keypair derived from the secret via BLAKE3

Content ids are BLAKE3-256 of the canonical bytes.
Payload encryption is XChaCha20-Poly1305 (libsodium IETF variant).
"""

# Key derivation
from .keys import (
    DerivedKeys,
    make_key,
    derive_verification_key,
    derive_encryption_keypair,
    derive_keys,
)

# Content id + signatures
from .signing import (
    compute_id,
    sign,
    verify,
)

# AEAD
from .aead import (
    derive_symmetric_key,
    xchacha20poly1305_encrypt,
    xchacha20poly1305_decrypt,
    encrypt_payload,
    decrypt_payload,
)

__all__ = [
    # Keys
    "DerivedKeys",
    "make_key",
    "derive_verification_key",
    "derive_encryption_keypair",
    "derive_keys",
    # Signing
    "compute_id",
    "sign",
    "verify",
    # AEAD
    "derive_symmetric_key",
    "xchacha20poly1305_encrypt",
    "xchacha20poly1305_decrypt",
    "encrypt_payload",
    "decrypt_payload",
]
