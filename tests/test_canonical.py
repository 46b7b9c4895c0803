# tests/test_canonical.py
"""
GXT Canonical Encoder Test Suite

Tests for: canonical_bytes, dumps_value / loads_value, PayloadKind, check_size
Categories:
  C1. Layout (fixed array, hex fields, empty parent)
  C2. Determinism (same input → same bytes, order preserved)
  C3. Structured values (accepted / rejected types)
  C4. Size ceiling
"""

from datetime import datetime, timezone

import cbor2
import pytest

from gxt.common import MAX_ENVELOPE_SIZE, PROTOCOL_VERSION
from gxt.errors import (
    InvalidEnvelopeError,
    SerializationError,
    TooLargeError,
    UnknownKindError,
)
from gxt.wire.canonical import (
    PayloadKind,
    canonical_bytes,
    check_size,
    dumps_value,
    loads_fields,
    loads_value,
    signable_fields,
)

VK = bytes(range(32))
EK = bytes(range(32, 64))
PARENT = b"\xab" * 32


# =============================================================================
# C1. Layout
# =============================================================================

def test_c1_1_six_element_array():
    """C1.1: Canonical bytes decode to [version, vk, ek, kind, payload, parent]"""
    data = canonical_bytes(VK, EK, PayloadKind.ID, {"name": "Bob"})
    decoded = cbor2.loads(data)
    assert decoded == [PROTOCOL_VERSION, VK.hex(), EK.hex(), "Id", {"name": "Bob"}, ""]


def test_c1_2_parent_as_hex():
    """C1.2: Present parent is lower-case hex"""
    data = canonical_bytes(VK, EK, PayloadKind.MSG, None, PARENT)
    decoded = cbor2.loads(data)
    assert decoded[3] == "Msg"
    assert decoded[5] == PARENT.hex()


def test_c1_3_signable_fields_accept_kind_string():
    """C1.3: Kind may be given as enum or its wire string"""
    assert signable_fields(VK, EK, "Msg", 1, None) == signable_fields(VK, EK, PayloadKind.MSG, 1, None)


def test_c1_4_kind_parse():
    """C1.4: Known kinds parse; unknown strings and non-strings do not"""
    assert PayloadKind.parse("Id") is PayloadKind.ID
    assert PayloadKind.parse("Msg") is PayloadKind.MSG
    with pytest.raises(UnknownKindError):
        PayloadKind.parse("Advisory")
    with pytest.raises(InvalidEnvelopeError):
        PayloadKind.parse("id")
    with pytest.raises(InvalidEnvelopeError):
        PayloadKind.parse(1)


# =============================================================================
# C2. Determinism
# =============================================================================

def test_c2_1_same_input_same_bytes():
    """C2.1: Identical inputs encode identically"""
    payload = {"trade": {"type": "sword", "amount": 5}, "tags": [1, 2.5, None, True]}
    a = canonical_bytes(VK, EK, PayloadKind.MSG, payload, PARENT)
    b = canonical_bytes(VK, EK, PayloadKind.MSG, dict(payload), PARENT)
    assert a == b


def test_c2_2_kind_changes_bytes():
    """C2.2: Kind is part of the signed bytes"""
    a = canonical_bytes(VK, EK, PayloadKind.ID, {"x": 1})
    b = canonical_bytes(VK, EK, PayloadKind.MSG, {"x": 1})
    assert a != b


def test_c2_3_parent_changes_bytes():
    """C2.3: Absent and present parent encode differently"""
    a = canonical_bytes(VK, EK, PayloadKind.MSG, 0)
    b = canonical_bytes(VK, EK, PayloadKind.MSG, 0, PARENT)
    assert a != b


def test_c2_4_map_order_preserved():
    """C2.4: Map keys keep insertion order through encode/decode"""
    value = {"z": 1, "a": 2, "m": 3}
    decoded = loads_value(dumps_value(value))
    assert list(decoded) == ["z", "a", "m"]


# =============================================================================
# C3. Structured Values
# =============================================================================

def test_c3_1_supported_types():
    """C3.1: Scalars, bytes, sequences and int-keyed maps survive a round trip"""
    value = {
        "null": None,
        "bool": False,
        "int": -(2 ** 40),
        "float": 1.5,
        "text": "héllo",
        "bytes": b"\x00\xff",
        "list": [1, [2, [3]]],
        7: "int key",
    }
    assert loads_value(dumps_value(value)) == value


def test_c3_2_unsupported_types_rejected():
    """C3.2: Sets, tuples, datetimes and arbitrary objects → SerializationError"""
    for bad in ({1, 2}, (1, 2), [1, (2, 3)], datetime.now(timezone.utc), object(), {(1, 2): "tuple key"}):
        with pytest.raises(SerializationError):
            dumps_value(bad)


def test_c3_3_nesting_limit():
    """C3.3: Values nested deeper than the limit are rejected"""
    value = []
    for _ in range(200):
        value = [value]
    with pytest.raises(SerializationError):
        dumps_value(value)


def test_c3_4_trailing_bytes_rejected():
    """C3.4: Decoder must consume the whole buffer"""
    with pytest.raises(InvalidEnvelopeError):
        loads_value(cbor2.dumps([1, 2]) + b"\x00")


def test_c3_5_malformed_cbor_rejected():
    """C3.5: Truncated or invalid CBOR → InvalidEnvelopeError"""
    for bad in (b"", b"\xff", cbor2.dumps("hello")[:-1]):
        with pytest.raises(InvalidEnvelopeError):
            loads_value(bad)


def test_c3_6_tags_rejected_on_decode():
    """C3.6: Tagged items are not structured values"""
    with pytest.raises(InvalidEnvelopeError):
        loads_value(cbor2.dumps(cbor2.CBORTag(4000, "x")))


# =============================================================================
# C4. Size Ceiling
# =============================================================================

def test_c4_1_check_size_inclusive():
    """C4.1: Exactly the ceiling passes, one over fails"""
    check_size(MAX_ENVELOPE_SIZE)
    with pytest.raises(TooLargeError) as exc:
        check_size(MAX_ENVELOPE_SIZE + 1)
    assert exc.value.size == MAX_ENVELOPE_SIZE + 1
    assert exc.value.limit == MAX_ENVELOPE_SIZE


def test_c4_2_canonical_boundary():
    """C4.2: Canonical bytes of exactly 64 KiB are accepted, 64 KiB + 1 rejected"""
    # 141 bytes of fixed fields around a 3-byte-header byte string
    n = MAX_ENVELOPE_SIZE - 141
    data = canonical_bytes(VK, EK, PayloadKind.ID, b"\x00" * n)
    assert len(data) == MAX_ENVELOPE_SIZE
    with pytest.raises(TooLargeError):
        canonical_bytes(VK, EK, PayloadKind.ID, b"\x00" * (n + 1))


def _nested(levels):
    value = 0
    for _ in range(levels):
        value = [value]
    return value


def test_c4_3_payload_depth_counted_from_payload():
    """C4.3: Nesting limit applies to the payload, not the envelope array around it"""
    data = canonical_bytes(VK, EK, PayloadKind.ID, _nested(128))
    assert cbor2.loads(data)[4] == _nested(128)
    assert loads_fields(data)[4] == _nested(128)
    with pytest.raises(SerializationError):
        canonical_bytes(VK, EK, PayloadKind.ID, _nested(129))
    with pytest.raises(SerializationError):
        dumps_value(_nested(129))
    assert loads_value(dumps_value(_nested(128))) == _nested(128)


def test_c4_4_loads_fields_requires_array():
    """C4.4: Envelope decoding rejects non-array items and deep fields"""
    with pytest.raises(InvalidEnvelopeError):
        loads_fields(cbor2.dumps({"version": 1}))
    with pytest.raises(InvalidEnvelopeError):
        loads_fields(cbor2.dumps([1, _nested(129)]))


# =============================================================================
# Main
# =============================================================================

def run_all_tests():
    tests = [v for k, v in sorted(globals().items()) if k.startswith("test_")]
    print("=" * 70)
    print("GXT Canonical Encoder Test Suite")
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
