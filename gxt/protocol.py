# gxt/protocol.py
"""
GXT Orchestrator

Public operations composed from the key, signing, AEAD and token layers.

    make_key()                          → secret (hex)
    make_id_card(secret, meta)          → token (kind Id)
    verify_message(token)               → Envelope (verified, payload as-is)
    encrypt_message(secret, card, p)    → token (kind Msg, payload encrypted)
    decrypt_message(secret, token)      → Envelope (payload decrypted)

Trust model:
    A valid id card only proves possession of the secret behind its
    verification key. Binding that key to a real-world identity is the
    caller's job.

Example:
    >>> alice = make_key()
    >>> bob = make_key()
    >>> card = make_id_card(bob, {"name": "Bob"})
    >>> token = encrypt_message(alice, card, {"hello": "bob"})
    >>> decrypt_message(bob, token).payload
    {'hello': 'bob'}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Union

from .common import (
    AEAD_ALGORITHM,
    NONCE_SIZE,
    PUBLIC_KEY_SIZE,
    _ct_eq,
    from_hex,
    to_hex,
)
from .cryptography.aead import decrypt_payload, encrypt_payload
from .cryptography.keys import derive_encryption_keypair, make_key
from .errors import AccessDeniedError, EncryptionError, GxtError, InvalidEnvelopeError
from .wire.canonical import PayloadKind
from .wire.envelope import Envelope
from .wire.token import decode_token, encode_token

logger = logging.getLogger(__name__)

Secret = Union[bytes, str]


# =============================================================================
# Identity
# =============================================================================

def make_id_card(secret: Secret, meta: Any = None) -> str:
    """
    Create a signed identity card carrying both public keys and meta.

    Args:
        secret: 32-byte Ed25519 secret (raw or hex)
        meta: Arbitrary structured value (e.g. {"name": "Bob"})

    Returns:
        "gxt:..." token of kind Id
    """
    envelope = Envelope.create_id_card(secret, meta)
    return encode_token(envelope)


# =============================================================================
# Verification
# =============================================================================

def verify_message(token: str) -> Envelope:
    """
    Decode a token and check its content id and signature.

    The payload is returned untouched, even when encrypted.

    Raises:
        GxtError subclass, in check order (see gxt.errors)
    """
    try:
        envelope = decode_token(token)
        envelope.verify()
    except GxtError as e:
        logger.debug(f"Token rejected: {type(e).__name__}: {e}")
        raise

    logger.debug(f"Verified {envelope.kind.value} token id={envelope.id[:16]}...")
    return envelope


verify = verify_message


# =============================================================================
# Encryption
# =============================================================================

def encrypt_message(
    secret: Secret,
    id_card_token: str,
    payload: Any,
    parent: Union[None, bytes, str] = None,
) -> str:
    """
    Encrypt payload to the owner of an id card and sign the result.

    The id card is untrusted input and is verified before use.

    Raises:
        InvalidEnvelopeError: id_card_token is not of kind Id
        GxtError: id card fails verification, or outer envelope too large
    """
    card = verify_message(id_card_token)
    if card.kind is not PayloadKind.ID:
        raise InvalidEnvelopeError(f"Expected an Id token, got {card.kind.value}")

    nonce, ciphertext = encrypt_payload(secret, card.encryption_key_bytes, payload)
    sealed: Dict[str, Any] = {
        "to": card.encryption_key,
        "enc": {
            "alg": AEAD_ALGORITHM,
            "nonce": to_hex(nonce),
            "ciphertext": to_hex(ciphertext),
        },
    }

    envelope = Envelope.create_message(secret, sealed, parent)
    logger.debug(f"Encrypted message {envelope.id[:16]}... to {card.encryption_key[:16]}...")
    return encode_token(envelope)


def _sealed_fields(payload: Any) -> tuple:
    """Extract (to, alg, nonce, ciphertext) from an encrypted payload."""
    if not isinstance(payload, dict):
        raise InvalidEnvelopeError("Encrypted payload must be a map")
    to = payload.get("to")
    enc = payload.get("enc")
    if not isinstance(to, str) or not isinstance(enc, dict):
        raise InvalidEnvelopeError("Encrypted payload must contain 'to' and 'enc'")

    alg = enc.get("alg")
    nonce = enc.get("nonce")
    ciphertext = enc.get("ciphertext")
    if not all(isinstance(v, str) for v in (alg, nonce, ciphertext)):
        raise InvalidEnvelopeError("'enc' must contain text fields alg, nonce, ciphertext")
    return to, alg, nonce, ciphertext


def decrypt_message(secret: Secret, token: str) -> Envelope:
    """
    Verify, authorize, then decrypt a message addressed to secret's owner.

    Returns:
        Copy of the verified envelope with the plaintext as payload

    Raises:
        GxtError subclass from verification
        InvalidEnvelopeError: not a Msg, or payload not in encrypted form
        AccessDeniedError: addressed to another encryption key
        EncryptionError: unknown algorithm or AEAD tag mismatch
    """
    envelope = verify_message(token)
    if envelope.kind is not PayloadKind.MSG:
        raise InvalidEnvelopeError(f"Expected a Msg token, got {envelope.kind.value}")

    to, alg, nonce_hex, ciphertext_hex = _sealed_fields(envelope.payload)

    _, my_encryption_key = derive_encryption_keypair(secret)
    recipient = from_hex(to, "to", PUBLIC_KEY_SIZE)
    if not _ct_eq(recipient, my_encryption_key):
        logger.debug(f"Message {envelope.id[:16]}... not addressed to this key")
        raise AccessDeniedError("Message is not addressed to this key")

    if alg != AEAD_ALGORITHM:
        raise EncryptionError(f"Unsupported algorithm: {alg!r}")

    nonce = from_hex(nonce_hex, "nonce", NONCE_SIZE)
    ciphertext = from_hex(ciphertext_hex, "ciphertext")

    plaintext = decrypt_payload(secret, envelope.encryption_key_bytes, nonce, ciphertext)
    logger.debug(f"Decrypted message {envelope.id[:16]}...")
    return envelope.with_payload(plaintext)


__all__ = [
    "make_key",
    "make_id_card",
    "verify_message",
    "verify",
    "encrypt_message",
    "decrypt_message",
]
