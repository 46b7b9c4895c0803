# gxt/errors.py
"""
GXT Errors

Every failure in the token engine is raised as a subclass of GxtError.
One class per failure kind, so callers can tell a tampered token from
a token that simply is not addressed to them.

Check order (cheapest first, never reordered):
    prefix → base58 → zstd → size → shape → version → kind/hex
    → content id → signature → (decrypt) recipient → AEAD tag
"""


class GxtError(Exception):
    """Base exception for all GXT errors."""
    pass


# =============================================================================
# Token Framing
# =============================================================================

class BadPrefixError(GxtError):
    """Token does not start with the fixed prefix."""
    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"Token must start with {prefix!r}")


class DecodeError(GxtError):
    """Token body is not valid base58."""
    pass


class CompressionError(GxtError):
    """Compressed stream is corrupt (or could not be produced)."""
    pass


class TooLargeError(GxtError):
    """Encoded envelope exceeds the size ceiling."""
    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Envelope too large: {size} > {limit} bytes")


# =============================================================================
# Structure
# =============================================================================

class InvalidEnvelopeError(GxtError):
    """Envelope has the wrong shape, arity or field types."""
    pass


class UnsupportedVersionError(InvalidEnvelopeError):
    """Envelope version is not the one this implementation speaks."""
    def __init__(self, version, expected: int):
        self.version = version
        self.expected = expected
        super().__init__(f"Unsupported version: {version!r}, expected {expected}")


class UnknownKindError(InvalidEnvelopeError):
    """Payload kind string is not a known kind."""
    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Unknown payload kind: {kind!r}")


class SerializationError(GxtError):
    """Payload cannot be encoded as a structured value."""
    pass


class HexDecodeError(GxtError):
    """Field is not valid hex."""
    def __init__(self, field: str, reason: str = ""):
        self.field = field
        msg = f"Invalid hex in {field}"
        super().__init__(f"{msg}: {reason}" if reason else msg)


class HexLengthError(GxtError):
    """Hex field decodes to the wrong number of bytes."""
    def __init__(self, field: str, expected: int, actual: int):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"{field} must be {expected} bytes, got {actual}")


# =============================================================================
# Authenticity
# =============================================================================

class BadIdError(GxtError):
    """Content id does not match the hash of the canonical bytes."""
    pass


class BadSignatureError(GxtError):
    """Ed25519 signature does not verify."""
    pass


# =============================================================================
# Confidentiality
# =============================================================================

class AccessDeniedError(GxtError):
    """Message is addressed to a different encryption key."""
    pass


class EncryptionError(GxtError):
    """Key agreement or AEAD encryption/decryption failed."""
    pass


__all__ = [
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
]
