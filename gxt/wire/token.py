# gxt/wire/token.py
"""
GXT Token Codec

    token = "gxt:" + base58( zstd( cbor(envelope[8]) ) )

Decode order (first failure wins):
    prefix → base58 → zstd → size → CBOR shape → version → kind/hex

Decompression is bounded: the declared frame size is checked before
any output is allocated, and frames without a declared size are read
incrementally and abandoned as soon as they pass the ceiling. The body
must be exactly one frame; trailing bytes are rejected.
"""

from __future__ import annotations

import io
import logging

import base58
import zstandard

from ..common import COMPRESSION_LEVEL, MAX_WIRE_SIZE, TOKEN_PREFIX
from ..errors import BadPrefixError, CompressionError, DecodeError, TooLargeError
from .canonical import check_size
from .envelope import Envelope

logger = logging.getLogger(__name__)

READ_CHUNK = 16384


# =============================================================================
# Compression
# =============================================================================

def compress_bytes(data: bytes, level: int = COMPRESSION_LEVEL) -> bytes:
    """zstd-compress (content size recorded in the frame header)."""
    cctx = zstandard.ZstdCompressor(level=level, write_content_size=True, write_checksum=False)
    return cctx.compress(data)


def decompress_bytes(data: bytes, limit: int = MAX_WIRE_SIZE) -> bytes:
    """
    Decompress one zstd frame, refusing output larger than limit.

    Raises:
        CompressionError: not a valid zstd frame
        TooLargeError: output exceeds limit
    """
    try:
        declared = zstandard.frame_content_size(data)
    except zstandard.ZstdError as e:
        raise CompressionError(f"Invalid zstd frame: {e}") from e

    dctx = zstandard.ZstdDecompressor()

    if declared >= 0:
        check_size(declared, limit)
        try:
            out = dctx.decompress(data, max_output_size=limit + 1)
        except zstandard.ZstdError as e:
            raise CompressionError(f"Decompression failed: {e}") from e
        check_size(len(out), limit)
        _check_single_frame(dctx, data)
        return out

    # Unknown content size: stream with a running total
    buf = io.BytesIO()
    total = 0
    try:
        with dctx.stream_reader(io.BytesIO(data)) as reader:
            while True:
                chunk = reader.read(READ_CHUNK)
                if not chunk:
                    break
                total += len(chunk)
                if total > limit:
                    raise TooLargeError(total, limit)
                buf.write(chunk)
    except zstandard.ZstdError as e:
        raise CompressionError(f"Decompression failed: {e}") from e
    _check_single_frame(dctx, data)
    return buf.getvalue()


def _check_single_frame(dctx: zstandard.ZstdDecompressor, data: bytes) -> None:
    """Reject bytes after the end of the (already size-checked) frame."""
    dobj = dctx.decompressobj()
    try:
        dobj.decompress(data)
    except zstandard.ZstdError as e:
        raise CompressionError(f"Decompression failed: {e}") from e
    if dobj.unused_data:
        raise CompressionError(f"Trailing bytes after zstd frame: {len(dobj.unused_data)}")


# =============================================================================
# Text Framing
# =============================================================================

def pack(raw: bytes) -> str:
    """Serialized envelope bytes → "gxt:..." token."""
    check_size(len(raw), MAX_WIRE_SIZE)
    return TOKEN_PREFIX + base58.b58encode(compress_bytes(raw)).decode("ascii")


def unpack(token: str) -> bytes:
    """
    "gxt:..." token → serialized envelope bytes (size-checked).

    Raises:
        BadPrefixError, DecodeError, CompressionError, TooLargeError
    """
    if not isinstance(token, str):
        raise DecodeError(f"Token must be text, got {type(token).__name__}")

    text = token.strip()
    if not text.startswith(TOKEN_PREFIX):
        raise BadPrefixError(TOKEN_PREFIX)

    body = text[len(TOKEN_PREFIX):]
    if not body:
        raise DecodeError("Empty token body")
    try:
        compressed = base58.b58decode(body)
    except ValueError as e:
        raise DecodeError(f"Invalid base58: {e}") from e

    raw = decompress_bytes(compressed)
    check_size(len(raw), MAX_WIRE_SIZE)
    return raw


# =============================================================================
# Envelope ↔ Token
# =============================================================================

def encode_token(envelope: Envelope) -> str:
    """Envelope → token string."""
    token = pack(envelope.to_bytes())
    logger.debug(f"Encoded {envelope.kind.value} token id={envelope.id[:16]}... ({len(token)} chars)")
    return token


def decode_token(token: str) -> Envelope:
    """
    Token string → Envelope, structure only.

    Authenticity is NOT checked here; use Envelope.verify() or
    gxt.verify_message().
    """
    return Envelope.from_bytes(unpack(token))
