# gxt/wire/envelope.py
"""
GXT Wire Format: Envelope v1

The full envelope travels as an 8-element CBOR array:

    ┌───┬─────────────────────────┬──────────────────────────────────────┐
    │ # │ field                   │ encoding                             │
    ├───┼─────────────────────────┼──────────────────────────────────────┤
    │ 0 │ version                 │ uint (must equal PROTOCOL_VERSION)   │
    │ 1 │ verification_key        │ hex text, 32B Ed25519 public key     │
    │ 2 │ encryption_key          │ hex text, 32B X25519 public key      │
    │ 3 │ kind                    │ text: "Id" | "Msg"                   │
    │ 4 │ payload                 │ any structured value                 │
    │ 5 │ parent                  │ hex text (32B) or "" when absent     │
    │ 6 │ id                      │ hex text, BLAKE3(canonical[0..5])    │
    │ 7 │ signature               │ hex text, Ed25519 over tag||canonical│
    └───┴─────────────────────────┴──────────────────────────────────────┘

Elements 0..5 are exactly the canonical bytes (see canonical.py).
Element count and order are the wire contract.

Usage:
    from gxt.wire import Envelope, PayloadKind

    env = Envelope.create(secret, PayloadKind.ID, {"name": "Bob"})
    wire = env.to_bytes()
    env = Envelope.from_bytes(wire)
    env.verify()
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..common import (
    ID_SIZE,
    MAX_WIRE_SIZE,
    PROTOCOL_VERSION,
    PUBLIC_KEY_SIZE,
    SIGNATURE_SIZE,
    coerce_parent,
    from_hex,
    to_hex,
)
from ..cryptography import signing
from ..cryptography.keys import derive_keys
from ..errors import InvalidEnvelopeError, UnsupportedVersionError
from .canonical import (
    PayloadKind,
    canonical_bytes,
    check_size,
    dumps_fields,
    loads_fields,
)

WIRE_FIELDS = 8


def _jsonable(value: Any) -> Any:
    """Structured value → JSON-friendly tree (bytes as hex)."""
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


# =============================================================================
# Envelope
# =============================================================================

@dataclass(frozen=True)
class Envelope:
    """
    Signed GXT envelope.

    Attributes:
        version: Protocol version (1)
        verification_key: Signer's Ed25519 public key (hex)
        encryption_key: Signer's X25519 public key (hex)
        kind: Payload kind (Id / Msg)
        payload: Opaque structured value, never interpreted here
        parent: Optional 32-byte reference to another envelope id (hex)
        id: Content id (hex)
        signature: Ed25519 signature (hex)
    """

    version: int
    verification_key: str
    encryption_key: str
    kind: PayloadKind
    payload: Any
    parent: Optional[str]
    id: str
    signature: str

    def __post_init__(self):
        """Validate field encodings (not authenticity; see verify())."""
        if isinstance(self.version, bool) or not isinstance(self.version, int):
            raise InvalidEnvelopeError(f"version must be an integer, got {type(self.version).__name__}")
        if self.version != PROTOCOL_VERSION:
            raise UnsupportedVersionError(self.version, PROTOCOL_VERSION)

        if not isinstance(self.kind, PayloadKind):
            raise InvalidEnvelopeError(f"kind must be PayloadKind, got {type(self.kind).__name__}")

        from_hex(self.verification_key, "verification_key", PUBLIC_KEY_SIZE)
        from_hex(self.encryption_key, "encryption_key", PUBLIC_KEY_SIZE)
        if self.parent is not None:
            from_hex(self.parent, "parent", ID_SIZE)
        from_hex(self.id, "id", ID_SIZE)
        from_hex(self.signature, "signature", SIGNATURE_SIZE)

    # =========================================================================
    # Raw Accessors
    # =========================================================================

    @property
    def verification_key_bytes(self) -> bytes:
        return bytes.fromhex(self.verification_key)

    @property
    def encryption_key_bytes(self) -> bytes:
        return bytes.fromhex(self.encryption_key)

    @property
    def parent_bytes(self) -> Optional[bytes]:
        return bytes.fromhex(self.parent) if self.parent is not None else None

    @property
    def id_bytes(self) -> bytes:
        return bytes.fromhex(self.id)

    @property
    def signature_bytes(self) -> bytes:
        return bytes.fromhex(self.signature)

    @property
    def is_encrypted(self) -> bool:
        """True for a Msg whose payload has the to/enc shape."""
        return (
            self.kind is PayloadKind.MSG
            and isinstance(self.payload, dict)
            and isinstance(self.payload.get("to"), str)
            and isinstance(self.payload.get("enc"), dict)
        )

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def create(
        cls,
        secret: Union[bytes, str],
        kind: PayloadKind,
        payload: Any,
        parent: Union[None, bytes, str] = None,
    ) -> Envelope:
        """
        Build and sign an envelope.

        Order: derive keys → canonical bytes (size check) → id → signature.
        """
        keys = derive_keys(secret)
        parent_raw = coerce_parent(parent)

        canonical = canonical_bytes(
            keys.verification_key,
            keys.encryption_key,
            kind,
            payload,
            parent_raw,
        )
        content_id = signing.compute_id(canonical)
        signature = signing.sign(secret, canonical)

        return cls(
            version=PROTOCOL_VERSION,
            verification_key=to_hex(keys.verification_key),
            encryption_key=to_hex(keys.encryption_key),
            kind=PayloadKind(kind),
            payload=payload,
            parent=to_hex(parent_raw) if parent_raw is not None else None,
            id=to_hex(content_id),
            signature=to_hex(signature),
        )

    @classmethod
    def create_id_card(cls, secret: Union[bytes, str], meta: Any = None) -> Envelope:
        """Create ID envelope (no parent)."""
        return cls.create(secret, PayloadKind.ID, meta)

    @classmethod
    def create_message(
        cls,
        secret: Union[bytes, str],
        payload: Any,
        parent: Union[None, bytes, str] = None,
    ) -> Envelope:
        """Create MSG envelope."""
        return cls.create(secret, PayloadKind.MSG, payload, parent)

    # =========================================================================
    # Authenticity
    # =========================================================================

    def canonical(self) -> bytes:
        """Canonical bytes re-derived from the fields (id/signature excluded)."""
        return canonical_bytes(
            self.verification_key_bytes,
            self.encryption_key_bytes,
            self.kind,
            self.payload,
            self.parent_bytes,
            self.version,
        )

    def verify(self) -> None:
        """
        Recompute content id, then check the signature.

        Raises:
            TooLargeError, BadIdError, BadSignatureError
        """
        signing.verify(
            self.verification_key_bytes,
            self.canonical(),
            self.signature_bytes,
            self.id_bytes,
        )

    def with_payload(self, payload: Any) -> Envelope:
        """Copy with a replaced payload (used after decryption only)."""
        return dataclasses.replace(self, payload=payload)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_list(self) -> list:
        """The 8-element wire array."""
        return [
            self.version,
            self.verification_key,
            self.encryption_key,
            self.kind.value,
            self.payload,
            self.parent if self.parent is not None else "",
            self.id,
            self.signature,
        ]

    def to_bytes(self) -> bytes:
        """Serialize to CBOR with size ceiling."""
        data = dumps_fields(self.to_list())
        check_size(len(data), MAX_WIRE_SIZE)
        return data

    @classmethod
    def from_list(cls, fields: Any) -> Envelope:
        """
        Parse the 8-element wire array.

        Check order: arity → version → field types → kind → hex.
        """
        if not isinstance(fields, list) or len(fields) != WIRE_FIELDS:
            got = len(fields) if isinstance(fields, list) else type(fields).__name__
            raise InvalidEnvelopeError(f"Envelope must be an array of {WIRE_FIELDS}, got {got}")

        version, vk, ek, kind, payload, parent, content_id, signature = fields

        if isinstance(version, bool) or not isinstance(version, int):
            raise InvalidEnvelopeError(f"version must be an integer, got {type(version).__name__}")
        if version != PROTOCOL_VERSION:
            raise UnsupportedVersionError(version, PROTOCOL_VERSION)

        for name, value in (
            ("verification_key", vk),
            ("encryption_key", ek),
            ("parent", parent),
            ("id", content_id),
            ("signature", signature),
        ):
            if not isinstance(value, str):
                raise InvalidEnvelopeError(f"{name} must be text, got {type(value).__name__}")

        return cls(
            version=version,
            verification_key=vk,
            encryption_key=ek,
            kind=PayloadKind.parse(kind),
            payload=payload,
            parent=parent or None,
            id=content_id,
            signature=signature,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Envelope:
        """Deserialize from CBOR (structure only; call verify() after)."""
        check_size(len(data), MAX_WIRE_SIZE)
        return cls.from_list(loads_fields(data))

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view, as exposed by the language bindings."""
        return {
            "version": self.version,
            "verification_key": self.verification_key,
            "encryption_key": self.encryption_key,
            "kind": self.kind.value,
            "payload": _jsonable(self.payload),
            "parent": self.parent,
            "id": self.id,
            "signature": self.signature,
        }

    def to_json(self, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), indent=2 if pretty else None)

    def __str__(self) -> str:
        parent = self.parent[:16] + "..." if self.parent else "-"
        return (
            f"Envelope(kind={self.kind.value}, id={self.id[:16]}..., "
            f"verification_key={self.verification_key[:16]}..., parent={parent})"
        )
