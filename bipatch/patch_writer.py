from __future__ import annotations

import logging
from typing import IO, Iterable

from bipatch.numbers import VarInt
from bipatch.patch import Control

log = logging.getLogger(__name__)


class Writer:
    def __init__(self, output: IO[bytes]) -> None:
        self.output: IO[bytes] = output
        self.offset = 0
        self.count = 0

    def write_controls(self, controls: Iterable[Control]) -> int:
        for control in controls:
            self.write_control(control)

        log.debug(f"wrote {self.count} records, {self.offset} bytes")
        return self.count

    def write_control(self, control: Control) -> None:
        self.write(VarInt.write(len(control.add)))
        self.write(control.add)
        self.write(VarInt.write(len(control.copy)))
        self.write(control.copy)
        self.write(VarInt.write_signed(control.seek))
        self.count += 1

    def write(self, data: bytes) -> None:
        if not data:
            return
        self.output.write(data)
        self.offset += len(data)
