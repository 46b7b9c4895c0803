# gxt/cryptography/aead.py
"""
GXT AEAD Layer

X25519 key agreement + BLAKE3 key derivation + XChaCha20-Poly1305.

    shared  = X25519(my_encryption_secret, their_encryption_key)
    key     = BLAKE3.derive_key("GXT-ENC-XCHACHA20POLY1305", shared)
    nonce   = 24 fresh random bytes per call (never a counter)
    ct||tag = XChaCha20-Poly1305(key, nonce, cbor(plaintext), aad=b"")

ECDH is commutative, so the sender (own secret, recipient key) and the
recipient (own secret, sender key) derive the same symmetric key.

XChaCha20-Poly1305 is libsodium's IETF construction (via PyNaCl bindings).
"""

from __future__ import annotations

import secrets
from typing import Any, Tuple, Union

import blake3
from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)
from nacl.bindings import (
    crypto_aead_xchacha20poly1305_ietf_decrypt,
    crypto_aead_xchacha20poly1305_ietf_encrypt,
)
from nacl.exceptions import CryptoError

from ..common import (
    NONCE_SIZE,
    PUBLIC_KEY_SIZE,
    SYMMETRIC_KEY_CONTEXT,
    TAG_SIZE,
)
from ..errors import EncryptionError, HexLengthError
from ..wire.canonical import dumps_value, loads_value
from .keys import derive_encryption_keypair


# =============================================================================
# Key Agreement
# =============================================================================

def derive_symmetric_key(my_secret: Union[bytes, str], their_encryption_key: bytes) -> bytes:
    """
    Shared XChaCha20-Poly1305 key between my signing secret and their
    X25519 public key.

    Raises:
        EncryptionError: their key is a low-order point (all-zero shared secret)
    """
    if len(their_encryption_key) != PUBLIC_KEY_SIZE:
        raise HexLengthError("encryption_key", PUBLIC_KEY_SIZE, len(their_encryption_key))

    x_secret, _ = derive_encryption_keypair(my_secret)
    try:
        shared = X25519PrivateKey.from_private_bytes(x_secret).exchange(
            X25519PublicKey.from_public_bytes(their_encryption_key)
        )
    except ValueError as e:
        raise EncryptionError(f"Key agreement failed: {e}") from e

    return blake3.blake3(shared, derive_key_context=SYMMETRIC_KEY_CONTEXT).digest()


# =============================================================================
# XChaCha20-Poly1305
# =============================================================================

def xchacha20poly1305_encrypt(key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
    """Encrypt; returns ciphertext || 16-byte tag."""
    if len(nonce) != NONCE_SIZE:
        raise HexLengthError("nonce", NONCE_SIZE, len(nonce))
    return crypto_aead_xchacha20poly1305_ietf_encrypt(plaintext, None, nonce, key)


def xchacha20poly1305_decrypt(key: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt ciphertext || tag.

    Raises:
        EncryptionError: tag does not verify (wrong key or tampered data)
    """
    if len(nonce) != NONCE_SIZE:
        raise HexLengthError("nonce", NONCE_SIZE, len(nonce))
    if len(ciphertext) < TAG_SIZE:
        raise EncryptionError("Ciphertext shorter than the authentication tag")
    try:
        return crypto_aead_xchacha20poly1305_ietf_decrypt(ciphertext, None, nonce, key)
    except CryptoError as e:
        raise EncryptionError("Decryption failed: authentication tag mismatch") from e


# =============================================================================
# Payload Encryption
# =============================================================================

def encrypt_payload(
    my_secret: Union[bytes, str],
    their_encryption_key: bytes,
    plaintext: Any,
) -> Tuple[bytes, bytes]:
    """
    Encrypt a structured value for the holder of their_encryption_key.

    The value is CBOR-serialized first; only the ciphertext ever reaches
    the signed envelope.

    Returns:
        (nonce, ciphertext_with_tag)
    """
    body = dumps_value(plaintext)
    key = derive_symmetric_key(my_secret, their_encryption_key)
    nonce = secrets.token_bytes(NONCE_SIZE)
    return nonce, xchacha20poly1305_encrypt(key, nonce, body)


def decrypt_payload(
    my_secret: Union[bytes, str],
    their_encryption_key: bytes,
    nonce: bytes,
    ciphertext: bytes,
) -> Any:
    """
    Inverse of encrypt_payload, from either side of the exchange.

    Raises:
        EncryptionError: AEAD tag mismatch
        InvalidEnvelopeError: authenticated body is not a structured value
    """
    key = derive_symmetric_key(my_secret, their_encryption_key)
    body = xchacha20poly1305_decrypt(key, nonce, ciphertext)
    return loads_value(body)
