from __future__ import annotations

from typing import IO


class Stream:
    """
    Sequential binary input over the decoded record stream that

    • keeps a running count of bytes handed to callers,
    • retries short reads until the request is satisfied or input ends,
    • can peek one byte ahead to tell a clean end of input from a
      truncated record.
    """

    def __init__(self, inp: IO[bytes], buffer: bytes = b"") -> None:
        self.input: IO[bytes] = inp
        self.offset = 0                       # total bytes returned to callers
        self.buffer = bytearray(buffer)       # unread prefetched data

    # ------------------------------------------------------------------ #
    # basic read primitives
    # ------------------------------------------------------------------ #

    def read(self, size: int) -> bytes:
        """
        Return up to *size* bytes. Fewer bytes means the input has ended.
        """
        data = bytearray(self.buffer[:size])
        del self.buffer[: len(data)]

        while len(data) < size:
            chunk = self.input.read(size - len(data))
            if not chunk:
                break
            data.extend(chunk)

        self.offset += len(data)
        return bytes(data)

    def readbyte(self) -> int:
        b = self.read(1)
        if not b:
            raise EOFError("Unexpected EOF when reading a byte")
        return b[0]

    def readinto(self, view: memoryview) -> int:
        """
        Fill *view* from the input and return the number of bytes stored,
        which is only short of ``len(view)`` at end of input.
        """
        filled = min(len(self.buffer), len(view))
        view[:filled] = self.buffer[:filled]
        del self.buffer[:filled]

        while filled < len(view):
            chunk = self.input.read(len(view) - filled)
            if not chunk:
                break
            view[filled : filled + len(chunk)] = chunk
            filled += len(chunk)

        self.offset += filled
        return filled

    # ------------------------------------------------------------------ #
    # convenience
    # ------------------------------------------------------------------ #

    @property
    def eof(self) -> bool:
        """
        There is still unread data if either the internal buffer
        is non-empty or the underlying stream has more bytes.
        """
        if self.buffer:
            return False

        # Try to peek 1 byte; if we get something keep it for the next read
        b = self.input.read(1)
        if not b:
            return True
        self.buffer.extend(b)
        return False
