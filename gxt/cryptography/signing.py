# gxt/cryptography/signing.py
"""
GXT Signer / Verifier

Two independent checks over the same canonical bytes:

  1. Content id: BLAKE3-256(canonical), a tamper-evident address
  2. Signature:  Ed25519(secret, DOMAIN_TAG || canonical)

Verification runs the id check first (cheap, no curve arithmetic on
already-tampered data) and the signature check second. Both must pass.
"""

from __future__ import annotations

import logging
from typing import Union

import blake3
from nacl.exceptions import BadSignatureError as NaclBadSignatureError
from nacl.signing import SigningKey, VerifyKey

from ..common import (
    DOMAIN_TAG,
    ID_SIZE,
    PUBLIC_KEY_SIZE,
    SIGNATURE_SIZE,
    _ct_eq,
    coerce_key,
)
from ..errors import BadIdError, BadSignatureError

logger = logging.getLogger(__name__)


def compute_id(canonical: bytes) -> bytes:
    """Content id (32 bytes) of the canonical bytes."""
    return blake3.blake3(canonical).digest()


def sign(secret: Union[bytes, str], canonical: bytes) -> bytes:
    """Ed25519 signature (64 bytes) over DOMAIN_TAG || canonical."""
    sk = SigningKey(coerce_key(secret))
    return sk.sign(DOMAIN_TAG + canonical).signature


def verify(
    verification_key: bytes,
    canonical: bytes,
    signature: bytes,
    claimed_id: bytes,
) -> None:
    """
    Check content id, then signature.

    Raises:
        BadIdError: claimed_id != compute_id(canonical)
        BadSignatureError: signature invalid under verification_key
    """
    if len(claimed_id) != ID_SIZE or not _ct_eq(compute_id(canonical), claimed_id):
        logger.debug("Content id mismatch")
        raise BadIdError("Content id does not match canonical bytes")

    if len(verification_key) != PUBLIC_KEY_SIZE or len(signature) != SIGNATURE_SIZE:
        raise BadSignatureError("Malformed verification key or signature")

    try:
        VerifyKey(verification_key).verify(DOMAIN_TAG + canonical, signature)
    except NaclBadSignatureError as e:
        logger.debug(f"Signature rejected for id {claimed_id.hex()[:16]}...")
        raise BadSignatureError("Signature verification failed") from e
