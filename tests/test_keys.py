# tests/test_keys.py
"""
GXT Key Derivation Test Suite

Tests for: make_key, derive_verification_key, derive_encryption_keypair
Categories:
  K1. Correctness (agreement with libsodium)
  K2. Reproducibility (determinism)
  K3. Input handling (raw bytes, hex, whitespace, bad input)
"""

import pytest
from nacl.bindings import crypto_scalarmult_base
from nacl.signing import SigningKey

from gxt.common import SECRET_SIZE
from gxt.cryptography.keys import (
    DerivedKeys,
    derive_encryption_keypair,
    derive_keys,
    derive_verification_key,
    make_key,
)
from gxt.errors import HexDecodeError, HexLengthError

SECRET = bytes(range(32))


# =============================================================================
# K1. Correctness
# =============================================================================

def test_k1_1_make_key_format():
    """K1.1: make_key returns 64 lower-case hex chars, fresh each call"""
    print("\n[K1.1] make_key format")
    keys = {make_key() for _ in range(16)}
    assert len(keys) == 16
    for key in keys:
        assert len(key) == 2 * SECRET_SIZE
        assert key == key.lower()
        bytes.fromhex(key)


def test_k1_2_verification_key_matches_nacl():
    """K1.2: Verification key is the Ed25519 public key"""
    expected = SigningKey(SECRET).verify_key.encode()
    assert derive_verification_key(SECRET) == expected


def test_k1_3_encryption_key_matches_libsodium():
    """K1.3: X25519 public key equals libsodium scalarmult_base of the derived secret"""
    x_secret, x_public = derive_encryption_keypair(SECRET)
    assert len(x_secret) == 32
    assert len(x_public) == 32
    assert crypto_scalarmult_base(x_secret) == x_public


def test_k1_4_encryption_secret_is_not_signing_secret():
    """K1.4: Encryption secret is derived, never the signing secret itself"""
    x_secret, x_public = derive_encryption_keypair(SECRET)
    assert x_secret != SECRET
    assert x_public != derive_verification_key(SECRET)


# =============================================================================
# K2. Reproducibility
# =============================================================================

def test_k2_1_derivation_is_deterministic():
    """K2.1: Same secret → same keys"""
    assert derive_encryption_keypair(SECRET) == derive_encryption_keypair(SECRET)
    assert derive_keys(SECRET) == derive_keys(SECRET)


def test_k2_2_different_secrets_differ():
    """K2.2: Different secrets → different keys"""
    other = bytes(range(1, 33))
    a = derive_keys(SECRET)
    b = derive_keys(other)
    assert a.verification_key != b.verification_key
    assert a.encryption_key != b.encryption_key


def test_k2_3_derived_keys_bundle():
    """K2.3: derive_keys agrees with the individual derivations"""
    keys = derive_keys(SECRET)
    assert isinstance(keys, DerivedKeys)
    assert keys.verification_key == derive_verification_key(SECRET)
    assert (keys.encryption_secret, keys.encryption_key) == derive_encryption_keypair(SECRET)


def test_k2_4_repr_hides_secret():
    """K2.4: repr shows public keys only"""
    keys = derive_keys(SECRET)
    text = repr(keys)
    assert keys.encryption_secret.hex() not in text
    assert keys.verification_key.hex() in text


# =============================================================================
# K3. Input Handling
# =============================================================================

def test_k3_1_hex_and_bytes_equivalent():
    """K3.1: Hex secret (with surrounding whitespace) equals raw secret"""
    assert derive_keys(SECRET.hex()) == derive_keys(SECRET)
    assert derive_keys("  " + SECRET.hex() + "\n") == derive_keys(SECRET)
    assert derive_keys(SECRET.hex().upper()) == derive_keys(SECRET)
    assert derive_keys(bytearray(SECRET)) == derive_keys(SECRET)


def test_k3_2_make_key_usable():
    """K3.2: make_key output is accepted by every derivation"""
    key = make_key()
    assert derive_keys(key) == derive_keys(bytes.fromhex(key))


def test_k3_3_bad_hex_rejected():
    """K3.3: Non-hex characters → HexDecodeError"""
    with pytest.raises(HexDecodeError):
        derive_keys("zz" * 32)
    with pytest.raises(HexDecodeError):
        derive_keys("abc")


def test_k3_4_wrong_length_rejected():
    """K3.4: Wrong decoded length → HexLengthError"""
    with pytest.raises(HexLengthError) as exc:
        derive_keys("00" * 31)
    assert exc.value.expected == 32
    assert exc.value.actual == 31
    with pytest.raises(HexLengthError):
        derive_keys(b"\x00" * 33)


def test_k3_5_wrong_type_rejected():
    """K3.5: Non-bytes, non-str secret → HexDecodeError"""
    with pytest.raises(HexDecodeError):
        derive_keys(12345)


# =============================================================================
# Main
# =============================================================================

def run_all_tests():
    tests = [v for k, v in sorted(globals().items()) if k.startswith("test_")]
    print("=" * 70)
    print("GXT Key Derivation Test Suite")
    print("=" * 70)
    failed = 0
    for test in tests:
        try:
            test()
            print(f"  {test.__name__}: PASS")
        except Exception as e:
            failed += 1
            print(f"  {test.__name__}: FAIL ({type(e).__name__}: {e})")
    print(f"\nResult: {len(tests) - failed}/{len(tests)} passed")
    return failed == 0


if __name__ == "__main__":
    run_all_tests()
