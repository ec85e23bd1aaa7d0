from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import IO, cast

from bipatch.cmd_base import Base
from bipatch.config_stack import Settings
from bipatch.patch import PatchError
from bipatch.patch_differ import Differ
from bipatch.patch_envelope import Deflater
from bipatch.patch_writer import Writer

log = logging.getLogger(__name__)


class DiffMixin:
    settings: Settings

    def write_patch(self, older: Path, newer: Path, patch: Path) -> int:
        start = time.monotonic()

        source = older.read_bytes()
        target = newer.read_bytes()

        with patch.open("wb") as f:
            with Deflater(f, self.settings.level) as deflater:
                writer = Writer(cast(IO[bytes], deflater))
                count = writer.write_controls(Differ.diff(source, target))

        log.debug(f"{writer.offset} record bytes compressed to {deflater.size}")
        log.info(f"diff completed in {time.monotonic() - start:.3f}s")
        return count


class Diff(DiffMixin, Base):
    USAGE = "diff OLDER NEWER PATCH"
    ARGC = 3

    def run(self) -> None:
        older, newer, patch = (self.expanded_path(arg) for arg in self.args)

        try:
            self.write_patch(older, newer, patch)
        except (OSError, PatchError) as e:
            self.fatal(e)

        self.exit(0)
