from __future__ import annotations

from typing import Iterator

from bipatch.numbers import VarInt
from bipatch.patch import (
    ADD,
    ADD_LEN,
    CHUNK_SIZE,
    COPY,
    COPY_LEN,
    SEEK,
    CorruptPatch,
    IntegerOverflow,
    NextRecord,
    TruncatedInteger,
)
from bipatch.patch_stream import Stream


class Reader:
    def __init__(self, f: Stream, chunk_size: int = CHUNK_SIZE) -> None:
        self.input: Stream = f
        self.chunk_size = chunk_size
        self.count: int = 0

    def at_end(self) -> bool:
        return self.input.eof

    def read_length(self, phase: str) -> int:
        try:
            return VarInt.read(self.input)
        except (TruncatedInteger, IntegerOverflow) as e:
            raise CorruptPatch(phase, str(e)) from e

    def read_seek(self) -> int:
        try:
            return VarInt.read_signed(self.input)
        except (TruncatedInteger, IntegerOverflow) as e:
            raise CorruptPatch(SEEK, str(e)) from e

    def read_into(self, view: memoryview, phase: str) -> None:
        got = self.input.readinto(view)
        if got < len(view):
            raise CorruptPatch(
                phase, f"expected {len(view)} payload bytes, found {got}"
            )

    def skip(self, size: int, phase: str) -> None:
        buffer = bytearray(min(size, self.chunk_size))
        remain = size

        while remain > 0:
            view = memoryview(buffer)[: min(len(buffer), remain)]
            self.read_into(view, phase)
            remain -= len(view)

    def scan(self) -> Iterator[NextRecord]:
        while not self.at_end():
            add_len = self.read_length(ADD_LEN)
            self.skip(add_len, ADD)
            copy_len = self.read_length(COPY_LEN)
            self.skip(copy_len, COPY)
            seek = self.read_seek()

            self.count += 1
            yield NextRecord(add_len, copy_len, seek)
