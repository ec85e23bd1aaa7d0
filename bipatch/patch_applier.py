from __future__ import annotations

import logging
import os
from typing import IO

from bipatch.patch import (
    ADD,
    ADD_LEN,
    BASE,
    CHUNK_SIZE,
    COPY,
    COPY_LEN,
    END_OF_STREAM,
    SEEK,
    Corrupt,
    CorruptPatch,
    EndOfStream,
    NextRecord,
)
from bipatch.numbers import INT64_MAX
from bipatch.patch_reader import Reader
from bipatch.patch_stream import Stream

log = logging.getLogger(__name__)


def add_mod256(residual: memoryview, base: memoryview) -> bytes:
    """
    Byte-wise ``(residual[i] + base[i]) % 256`` over equal-length spans.

    The low seven bits of every byte are summed without carrying into the
    next byte, and the top bit is the carry xor both top bits.
    """
    size = len(residual)
    x = int.from_bytes(residual, "little")
    y = int.from_bytes(base, "little")
    low = int.from_bytes(b"\x7f" * size, "little")
    high = int.from_bytes(b"\x80" * size, "little")

    return (((x & low) + (y & low)) ^ ((x ^ y) & high)).to_bytes(size, "little")


class Applier:
    def __init__(
        self,
        patch: Stream,
        base: IO[bytes],
        output: IO[bytes],
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk size must be positive: {chunk_size}")

        self.reader = Reader(patch, chunk_size)
        self.base = base
        self.output = output
        self.chunk_size = chunk_size
        self.cursor = base.tell()
        self.count = 0
        self.size = 0

    @staticmethod
    def apply_patch(
        patch: IO[bytes],
        base: IO[bytes],
        output: IO[bytes],
        chunk_size: int = CHUNK_SIZE,
    ) -> int:
        return Applier(Stream(patch), base, output, chunk_size).apply()

    def apply(self) -> int:
        buf1 = bytearray(self.chunk_size)
        buf2 = bytearray(self.chunk_size)

        while True:
            outcome = self.step(buf1, buf2)

            if isinstance(outcome, EndOfStream):
                break
            if isinstance(outcome, Corrupt):
                raise CorruptPatch(outcome.phase, outcome.reason)

        log.debug(f"applied {self.count} records, {self.size} bytes written")
        return self.count

    def step(
        self, buf1: bytearray, buf2: bytearray
    ) -> NextRecord | EndOfStream | Corrupt:
        if len(buf1) != len(buf2):
            raise ValueError(
                f"chunk buffers differ in size: {len(buf1)} and {len(buf2)}"
            )

        try:
            if self.reader.at_end():
                return END_OF_STREAM

            add_len = self.reader.read_length(ADD_LEN)
            self.add(add_len, buf1, buf2)

            copy_len = self.reader.read_length(COPY_LEN)
            self.copy(copy_len, buf1)

            seek = self.reader.read_seek()
            if seek != 0:
                self.seek(seek)
        except CorruptPatch as e:
            return Corrupt(e.phase, e.message)

        self.count += 1
        return NextRecord(add_len, copy_len, seek)

    def add(self, add_len: int, buf1: bytearray, buf2: bytearray) -> None:
        remain = add_len

        while remain > 0:
            size = min(len(buf1), remain)
            residual = memoryview(buf1)[:size]
            older = memoryview(buf2)[:size]

            self.reader.read_into(residual, ADD)
            self.read_base(older)
            residual[:] = add_mod256(residual, older)
            self.write(residual)

            remain -= size

    def copy(self, copy_len: int, buf: bytearray) -> None:
        remain = copy_len

        while remain > 0:
            view = memoryview(buf)[: min(len(buf), remain)]
            self.reader.read_into(view, COPY)
            self.write(view)
            remain -= len(view)

    def seek(self, amount: int) -> None:
        target = self.cursor + amount
        if not (0 <= target <= INT64_MAX):
            raise CorruptPatch(
                SEEK, f"seek by {amount} from {self.cursor} leaves the base"
            )

        try:
            self.base.seek(target, os.SEEK_SET)
        except (OverflowError, ValueError) as e:
            raise CorruptPatch(SEEK, f"cannot seek base to {target}: {e}") from e

        self.cursor = target

    def read_base(self, view: memoryview) -> None:
        filled = 0

        while filled < len(view):
            got = self.base.readinto(view[filled:])  # type: ignore[attr-defined]
            if not got:
                raise CorruptPatch(
                    BASE, f"base data ended at offset {self.cursor + filled}"
                )
            filled += got

        self.cursor += filled

    def write(self, data: memoryview) -> None:
        self.output.write(data)
        self.size += len(data)
