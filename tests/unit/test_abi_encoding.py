"""
ABI encoder tests (abi.encode head/tail layout)

Known-answer vectors are cross-checked against Solidity's `abi.encode`; the
remaining cases pin down the layout rules one at a time: static words,
in-place static composites, offsets of dynamic members, and tails.
"""

from __future__ import annotations

import pytest

from ethbridge.abi import (
    INT256_MAX,
    INT256_MIN,
    UINT256_MAX,
    Address,
    Array,
    Bool,
    Bytes,
    FixedArray,
    FixedBytes,
    Int,
    String,
    Tuple,
    Uint,
    encode,
    encode_word,
    encoded_size,
    head_size,
    is_dynamic,
    signature,
)
from ethbridge.errors import TokenError


def w(n: int) -> str:
    """One 32-byte word holding `n`, as hex."""
    return f"{n:064x}"


def rpad(data: bytes) -> str:
    h = data.hex()
    return h + "0" * (-len(h) % 64)


# -- Known vectors -------------------------------------------------------------

@pytest.mark.vectors
def test_uint_and_string_vector() -> None:
    expected = (
        "000000000000000000000000000000000000000000000000000000000000002a"
        "0000000000000000000000000000000000000000000000000000000000000040"
        "0000000000000000000000000000000000000000000000000000000000000004"
        "7465737400000000000000000000000000000000000000000000000000000000"
    )
    assert encode([Uint(42), String("test")]).hex() == expected


@pytest.mark.vectors
def test_address_is_left_padded() -> None:
    addr = bytes.fromhex("f0457e703bf0b9deb1a6003ffd71c77e44575f95")
    assert encode([Address(addr)]).hex() == (
        "000000000000000000000000f0457e703bf0b9deb1a6003ffd71c77e44575f95"
    )


@pytest.mark.vectors
def test_validator_set_shape_vector() -> None:
    addr = bytes.fromhex("241d37b7cf5233b3b0b204321420a86e8f7bfdb5")
    tokens = [Tuple((Array((Address(addr),)), Array((Uint(8828299),)), Uint(0)))]
    expected = (
        w(0x20)
        + w(0x60)
        + w(0xA0)
        + w(0)
        + w(1)
        + "000000000000000000000000241d37b7cf5233b3b0b204321420a86e8f7bfdb5"
        + w(1)
        + w(0x86B58B)
    )
    assert encode(tokens).hex() == expected


# -- Static words --------------------------------------------------------------

def test_empty_sequence_encodes_to_nothing() -> None:
    assert encode([]) == b""


@pytest.mark.parametrize(
    "token, expected",
    [
        (Uint(0), w(0)),
        (Uint(UINT256_MAX), "f" * 64),
        (Bool(True), w(1)),
        (Bool(False), w(0)),
        (Int(-1), "f" * 64),
        (Int(INT256_MAX), "7" + "f" * 63),
        (Int(INT256_MIN), "8" + "0" * 63),
        (FixedBytes(b"\x01\x02"), "0102" + "0" * 60),
        (FixedBytes(b"\xaa" * 32), "aa" * 32),
    ],
)
def test_static_words(token, expected: str) -> None:
    assert encode_word(token).hex() == expected
    assert encode([token]).hex() == expected


def test_encode_word_rejects_dynamic_tokens() -> None:
    with pytest.raises(TypeError):
        encode_word(String("x"))
    with pytest.raises(TypeError):
        encode_word(Tuple((Bytes(b""),)))


# -- Static composites are written in place ------------------------------------

def test_static_tuple_is_inlined() -> None:
    t = Tuple((Uint(1), Bool(True)))
    assert not is_dynamic(t)
    assert head_size(t) == 64
    assert encode([t]).hex() == w(1) + w(1)


def test_static_fixed_array_is_inlined() -> None:
    fa = FixedArray((Uint(7), Uint(8), Uint(9)))
    assert encode([Uint(1), fa]).hex() == w(1) + w(7) + w(8) + w(9)


def test_nested_static_tuple_heads_shift_offsets() -> None:
    # 3 head words for the tuple + 1 offset word, so the string starts at 0x80.
    tokens = [Tuple((Uint(1), Tuple((Uint(2), Uint(3))))), String("a")]
    assert encode(tokens).hex() == (
        w(1) + w(2) + w(3) + w(0x80) + w(1) + rpad(b"a")
    )


# -- Dynamic values --------------------------------------------------------------

def test_empty_string_and_bytes() -> None:
    assert encode([String("")]).hex() == w(0x20) + w(0)
    assert encode([Bytes(b"")]).hex() == w(0x20) + w(0)


def test_bytes_longer_than_a_word_pad_to_multiple() -> None:
    data = bytes(range(33))
    out = encode([Bytes(data)])
    assert len(out) == 32 + 32 + 64
    assert out.hex() == w(0x20) + w(33) + rpad(data)


def test_string_is_utf8_encoded() -> None:
    s = "héllo"
    raw = s.encode("utf-8")
    assert encode([String(s)]).hex() == w(0x20) + w(len(raw)) + rpad(raw)


def test_dynamic_array_of_uints() -> None:
    assert encode([Array((Uint(1), Uint(2)))]).hex() == w(0x20) + w(2) + w(1) + w(2)


def test_empty_dynamic_array() -> None:
    assert encode([Array(())]).hex() == w(0x20) + w(0)


def test_array_of_strings_offsets_are_relative_to_items() -> None:
    tokens = [Array((String("a"), String("b")))]
    assert encode(tokens).hex() == (
        w(0x20)
        + w(2)
        + w(0x40)
        + w(0x80)
        + w(1)
        + rpad(b"a")
        + w(1)
        + rpad(b"b")
    )


def test_dynamic_tuple_has_no_length_word() -> None:
    tokens = [Tuple((Uint(1), String("a")))]
    assert encode(tokens).hex() == w(0x20) + w(1) + w(0x40) + w(1) + rpad(b"a")


def test_fixed_array_of_dynamic_items_is_dynamic() -> None:
    fa = FixedArray((Bytes(b"\x01"), Bytes(b"\x02")))
    assert is_dynamic(fa)
    assert head_size(fa) == 32
    assert encode([fa]).hex() == (
        w(0x20)
        + w(0x40)
        + w(0x80)
        + w(1)
        + rpad(b"\x01")
        + w(1)
        + rpad(b"\x02")
    )


def test_tails_follow_head_order() -> None:
    tokens = [String("x"), Uint(5), Bytes(b"yz")]
    assert encode(tokens).hex() == (
        w(0x60) + w(5) + w(0xA0) + w(1) + rpad(b"x") + w(2) + rpad(b"yz")
    )


@pytest.mark.parametrize(
    "tokens",
    [
        [],
        [Uint(1)],
        [String("hello world, this spans more than one word of output")],
        [Array((Array((Uint(1),)), Array(())))],
        [Tuple((Bool(True), Array((String("a"),)), FixedArray((Uint(1), Uint(2)))))],
    ],
)
def test_size_prepass_matches_output(tokens) -> None:
    assert encoded_size(tokens) == len(encode(tokens))
    assert len(encode(tokens)) % 32 == 0


# -- Token validation --------------------------------------------------------------

@pytest.mark.parametrize(
    "build",
    [
        lambda: Uint(-1),
        lambda: Uint(UINT256_MAX + 1),
        lambda: Uint(True),
        lambda: Int(INT256_MIN - 1),
        lambda: Bool(1),
        lambda: Address(b"\x00" * 19),
        lambda: FixedBytes(b""),
        lambda: FixedBytes(b"\x00" * 33),
        lambda: String(b"bytes"),
        lambda: String("\ud800"),
        lambda: String("a\udc80b"),
        lambda: Bytes("text"),
        lambda: Array((Uint(1), Bool(True))),
        lambda: Array((Tuple((Uint(1),)), Tuple((String("x"),)))),
        lambda: Array((Tuple((Uint(1),)), Tuple((Uint(1), Uint(2))))),
        lambda: Array((Array((Uint(1),)), Array((Bool(True),)))),
        lambda: Array((Array(()), Array((Uint(1),)), Array((Bool(True),)))),
        lambda: Array((FixedBytes(b"\x01"), FixedBytes(b"\x01\x02"))),
        lambda: FixedArray((FixedArray((Uint(1),)), FixedArray((Uint(1), Uint(2))))),
        lambda: FixedArray((Bytes(b""), String(""))),
        lambda: Tuple((Uint(1), 2)),
    ],
)
def test_invalid_tokens_are_rejected(build) -> None:
    with pytest.raises(TokenError):
        build()


def test_token_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        Uint(-5)


def test_tuple_members_may_differ_in_kind() -> None:
    t = Tuple((Uint(1), Bool(False), String("s")))
    assert len(t.items) == 3


def test_string_keeps_its_utf8_bytes() -> None:
    s = String("héllo")
    assert s.utf8 == "héllo".encode("utf-8")
    assert s == String("héllo")
    assert "utf8" not in repr(s)


def test_unencodable_string_never_reaches_the_encoder() -> None:
    with pytest.raises(TokenError) as ei:
        String("ok\ud800")
    assert ei.value.data["position"] == 2


def test_empty_arrays_match_any_element_type() -> None:
    a = Array((Array(()), Array((Uint(1),)), Array(())))
    assert signature(a) == ("array", ("array", ("uint",)))
    nested = Array((Array((Array(()),)), Array((Array((String("x"),)),))))
    assert signature(nested) == ("array", ("array", ("array", ("string",))))


def test_signatures_of_composites() -> None:
    assert signature(FixedBytes(b"\x00" * 4)) == ("bytes", 4)
    assert signature(Tuple((Address(b"\x00" * 20), Bytes(b"")))) == (
        "tuple",
        (("address",), ("dynbytes",)),
    )
    assert signature(FixedArray((Uint(1), Uint(2)))) == ("fixed", 2, ("uint",))
    assert signature(Array(())) == ("array", None)


def test_arrays_of_equal_shape_tuples_are_accepted() -> None:
    a = Array((Tuple((Uint(1), String("a"))), Tuple((Uint(2), String("bb")))))
    assert len(a.items) == 2
    assert encoded_size([a]) == len(encode([a]))
