from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from counter_program.errors import InvalidAccountData
from counter_program.state import (
    BUMP_OFFSET,
    CounterState,
    read_bump,
    read_value,
    write_value,
)
from counter_program.types.ints import U64_MAX


def test_known_layout():
    state = CounterState(value=0x0102030405060708, is_initialized=True, bump=254)
    assert state.pack() == bytes([8, 7, 6, 5, 4, 3, 2, 1, 1, 254])


def test_new_record_is_initialized_with_zero_value():
    st_ = CounterState.new(0, 251)
    assert st_.pack() == b"\x00" * 8 + b"\x01\xfb"


def test_nonzero_flag_byte_decodes_as_true():
    raw = b"\x05" + b"\x00" * 7 + b"\x07" + b"\x10"
    decoded = CounterState.unpack(raw)
    assert decoded.is_initialized is True
    assert decoded.value == 5
    assert decoded.bump == 16


@given(
    value=st.integers(min_value=0, max_value=U64_MAX),
    initialized=st.booleans(),
    bump=st.integers(min_value=0, max_value=255),
)
def test_pack_unpack_identity(value: int, initialized: bool, bump: int):
    state = CounterState(value=value, is_initialized=initialized, bump=bump)
    packed = state.pack()
    assert len(packed) == CounterState.LEN
    assert CounterState.unpack(packed) == state


def test_unpack_reads_prefix_of_longer_buffer():
    raw = CounterState.new(42, 9).pack() + b"\xff" * 6
    assert CounterState.unpack(raw) == CounterState.new(42, 9)


@pytest.mark.parametrize("n", [0, 1, 9])
def test_short_buffers_rejected(n: int):
    buf = bytearray(n)
    with pytest.raises(InvalidAccountData):
        CounterState.unpack(buf)
    with pytest.raises(InvalidAccountData):
        read_bump(buf)
    with pytest.raises(InvalidAccountData):
        read_value(buf)
    with pytest.raises(InvalidAccountData):
        write_value(buf, 1)
    with pytest.raises(InvalidAccountData):
        CounterState.new(0, 0).pack_into(buf)


def test_field_accessors_touch_only_their_bytes():
    buf = bytearray(CounterState.new(7, 200).pack())
    assert read_bump(buf) == 200
    assert read_value(buf) == 7
    write_value(buf, U64_MAX)
    assert buf[:8] == b"\xff" * 8
    assert buf[8] == 1
    assert buf[BUMP_OFFSET] == 200


@pytest.mark.parametrize(
    "kwargs,exc",
    [
        ({"value": -1, "is_initialized": True, "bump": 0}, ValueError),
        ({"value": U64_MAX + 1, "is_initialized": True, "bump": 0}, OverflowError),
        ({"value": 0, "is_initialized": True, "bump": 256}, ValueError),
    ],
)
def test_out_of_range_fields_rejected(kwargs, exc):
    with pytest.raises(exc):
        CounterState(**kwargs)
