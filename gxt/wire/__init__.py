# gxt/wire/__init__.py
"""
GXT Wire Format v1

    token = "gxt:" + base58( zstd( cbor([version, verification_key,
                                         encryption_key, kind, payload,
                                         parent, id, signature]) ) )

Modules:
    canonical: signable bytes + structured value codec
    envelope:  Envelope (8-element array)
    token:     zstd / base58 / prefix framing

Usage:
    from gxt.wire import Envelope, PayloadKind, encode_token, decode_token

    env = Envelope.create_id_card(secret, {"name": "Bob"})
    token = encode_token(env)
    env = decode_token(token)   # structure only
    env.verify()                # content id + signature
"""

from .canonical import (
    PayloadKind,
    dumps_value,
    loads_value,
    dumps_fields,
    loads_fields,
    check_size,
    signable_fields,
    canonical_bytes,
)

from .envelope import (
    Envelope,
    WIRE_FIELDS,
)

from .token import (
    compress_bytes,
    decompress_bytes,
    pack,
    unpack,
    encode_token,
    decode_token,
)

__all__ = [
    # Canonical
    "PayloadKind",
    "dumps_value",
    "loads_value",
    "dumps_fields",
    "loads_fields",
    "check_size",
    "signable_fields",
    "canonical_bytes",
    # Envelope
    "Envelope",
    "WIRE_FIELDS",
    # Token
    "compress_bytes",
    "decompress_bytes",
    "pack",
    "unpack",
    "encode_token",
    "decode_token",
]
