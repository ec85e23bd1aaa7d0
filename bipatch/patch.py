from __future__ import annotations

from dataclasses import dataclass

CHUNK_SIZE: int = 64 * 1024
COMPRESSION_LEVEL: int = 9
WINDOW_BITS: int = 15

ADD_LEN: str = "add_len"
ADD: str = "add"
COPY_LEN: str = "copy_len"
COPY: str = "copy"
SEEK: str = "seek"
BASE: str = "base"
ENVELOPE: str = "envelope"


class PatchError(Exception):
    pass


class TruncatedInteger(PatchError):
    pass


class IntegerOverflow(PatchError):
    pass


class CorruptPatch(PatchError):
    def __init__(self, phase: str, message: str) -> None:
        super().__init__(f"corrupt patch ({phase}): {message}")
        self.phase = phase
        self.message = message


class VerificationMismatch(PatchError):
    pass


class Control:
    def __init__(self, add: bytes = b"", copy: bytes = b"", seek: int = 0):
        self.add = add
        self.copy = copy
        self.seek = seek

    @property
    def output_size(self) -> int:
        return len(self.add) + len(self.copy)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Control):
            return NotImplemented
        return (
            self.add == other.add
            and self.copy == other.copy
            and self.seek == other.seek
        )

    def __repr__(self) -> str:
        return f"Control(add={self.add!r}, copy={self.copy!r}, seek={self.seek})"


@dataclass(frozen=True)
class NextRecord:
    add_len: int
    copy_len: int
    seek: int


@dataclass(frozen=True)
class EndOfStream:
    pass


@dataclass(frozen=True)
class Corrupt:
    phase: str
    reason: str


END_OF_STREAM = EndOfStream()
