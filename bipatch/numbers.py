from __future__ import annotations

from bipatch.patch import IntegerOverflow, TruncatedInteger

UINT64_LIMIT: int = 1 << 64
INT64_MIN: int = -(1 << 63)
INT64_MAX: int = (1 << 63) - 1
MAX_VARINT_LEN: int = 10


class ZigZag:
    @staticmethod
    def encode(value: int) -> int:
        if not (INT64_MIN <= value <= INT64_MAX):
            raise ValueError(f"signed value out of range: {value}")
        return ((value << 1) ^ (value >> 63)) & (UINT64_LIMIT - 1)

    @staticmethod
    def decode(value: int) -> int:
        return (value >> 1) ^ -(value & 1)


class VarInt:
    @staticmethod
    def write(value: int) -> bytes:
        if not (0 <= value < UINT64_LIMIT):
            raise ValueError(f"unsigned value out of range: {value}")

        parts = []

        while value > 0x7F:
            parts.append(0x80 | (value & 0x7F))
            value >>= 7

        parts.append(value)
        return bytes(parts)

    @staticmethod
    def read(stream) -> int:
        """
        Reads one unsigned varint from *stream*, which must offer
        ``readbyte()`` raising EOFError at end of input.
        """
        value = 0
        shift = 0

        for i in range(MAX_VARINT_LEN):
            try:
                byte = stream.readbyte()
            except EOFError as e:
                raise TruncatedInteger(
                    f"input ended after {i} byte(s) of a varint"
                ) from e

            if i == MAX_VARINT_LEN - 1 and byte > 0x01:
                raise IntegerOverflow("varint does not fit in 64 bits")

            value |= (byte & 0x7F) << shift
            shift += 7

            if byte < 0x80:
                return value

        raise IntegerOverflow("varint does not fit in 64 bits")

    @staticmethod
    def write_signed(value: int) -> bytes:
        return VarInt.write(ZigZag.encode(value))

    @staticmethod
    def read_signed(stream) -> int:
        return ZigZag.decode(VarInt.read(stream))
