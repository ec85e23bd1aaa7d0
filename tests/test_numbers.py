from io import BytesIO

import pytest

from bipatch.numbers import VarInt, ZigZag
from bipatch.patch import IntegerOverflow, TruncatedInteger
from bipatch.patch_stream import Stream


def stream_of(data: bytes) -> Stream:
    return Stream(BytesIO(data))


@pytest.mark.parametrize(
    "value, encoded",
    [
        (0, b"\x00"),
        (1, b"\x01"),
        (127, b"\x7f"),
        (128, b"\x80\x01"),
        (300, b"\xac\x02"),
        (16384, b"\x80\x80\x01"),
        (2**64 - 1, b"\xff" * 9 + b"\x01"),
    ],
)
def test_writes_unsigned_values_low_group_first(value: int, encoded: bytes) -> None:
    assert VarInt.write(value) == encoded
    assert VarInt.read(stream_of(encoded)) == value


@pytest.mark.parametrize(
    "value, mapped",
    [
        (0, 0),
        (-1, 1),
        (1, 2),
        (-2, 3),
        (2, 4),
        (2**63 - 1, 2**64 - 2),
        (-(2**63), 2**64 - 1),
    ],
)
def test_zigzag_maps_small_magnitudes_to_small_values(value: int, mapped: int) -> None:
    assert ZigZag.encode(value) == mapped
    assert ZigZag.decode(mapped) == value


def test_signed_values_use_the_zigzag_mapping() -> None:
    assert VarInt.write_signed(-1) == b"\x01"
    assert VarInt.write_signed(4) == b"\x08"
    assert VarInt.write_signed(-65) == b"\x81\x01"
    assert VarInt.read_signed(stream_of(b"\x81\x01")) == -65


def test_reads_consecutive_values_from_one_stream() -> None:
    stream = stream_of(VarInt.write(300) + VarInt.write_signed(-3) + VarInt.write(0))

    assert VarInt.read(stream) == 300
    assert VarInt.read_signed(stream) == -3
    assert VarInt.read(stream) == 0
    assert stream.eof


@pytest.mark.parametrize("data", [b"", b"\x80", b"\xff\xff", b"\x80" * 9])
def test_fails_when_input_ends_before_a_terminating_byte(data: bytes) -> None:
    with pytest.raises(TruncatedInteger):
        VarInt.read(stream_of(data))


@pytest.mark.parametrize("data", [b"\xff" * 9 + b"\x02", b"\x80" * 10 + b"\x00"])
def test_rejects_values_wider_than_64_bits(data: bytes) -> None:
    with pytest.raises(IntegerOverflow):
        VarInt.read(stream_of(data))


@pytest.mark.parametrize("value", [-1, 2**64])
def test_rejects_unsigned_values_out_of_range(value: int) -> None:
    with pytest.raises(ValueError):
        VarInt.write(value)


@pytest.mark.parametrize("value", [2**63, -(2**63) - 1])
def test_rejects_signed_values_out_of_range(value: int) -> None:
    with pytest.raises(ValueError):
        VarInt.write_signed(value)
