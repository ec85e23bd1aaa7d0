from __future__ import annotations

import zlib
from types import TracebackType
from typing import IO, Optional, Type

from bipatch.patch import (
    CHUNK_SIZE,
    COMPRESSION_LEVEL,
    ENVELOPE,
    WINDOW_BITS,
    CorruptPatch,
)


class Deflater:
    def __init__(
        self,
        output: IO[bytes],
        level: int = COMPRESSION_LEVEL,
        window_bits: int = WINDOW_BITS,
    ) -> None:
        self.output: IO[bytes] = output
        self.compressor = zlib.compressobj(level, zlib.DEFLATED, window_bits)
        self.size = 0
        self.closed = False

    def write(self, data: bytes) -> int:
        self._emit(self.compressor.compress(data))
        return len(data)

    def close(self) -> None:
        if self.closed:
            return

        self._emit(self.compressor.flush())
        self.output.flush()
        self.closed = True

    def _emit(self, data: bytes) -> None:
        if data:
            self.output.write(data)
            self.size += len(data)

    def __enter__(self) -> Deflater:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        if exc_type is None:
            self.close()


class Inflater:
    def __init__(
        self,
        inp: IO[bytes],
        chunk_size: int = CHUNK_SIZE,
        window_bits: int = WINDOW_BITS,
    ) -> None:
        self.input: IO[bytes] = inp
        self.chunk_size = chunk_size
        self.decompressor = zlib.decompressobj(window_bits)
        self.pending = b""

    def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = self.chunk_size

        output = bytearray(self.pending[:size])
        self.pending = self.pending[size:]

        while len(output) < size and not self.decompressor.eof:
            data = self.decompressor.unconsumed_tail
            if not data:
                data = self.input.read(self.chunk_size)

            try:
                if data:
                    wanted = size - len(output)
                    output.extend(self.decompressor.decompress(data, wanted))
                else:
                    self.pending = self.decompressor.flush()
                    if not self.decompressor.eof:
                        raise CorruptPatch(
                            ENVELOPE, "compressed stream ended unexpectedly"
                        )
                    wanted = size - len(output)
                    output.extend(self.pending[:wanted])
                    self.pending = self.pending[wanted:]
            except zlib.error as e:
                raise CorruptPatch(ENVELOPE, f"zlib decompression error: {e}") from e

        if self.decompressor.eof and not self.pending:
            self.check_trailer()

        return bytes(output)

    def check_trailer(self) -> None:
        if self.decompressor.unused_data or self.input.read(1):
            raise CorruptPatch(ENVELOPE, "unexpected data after compressed stream")
