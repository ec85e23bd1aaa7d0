from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import IO, cast

from bipatch.cmd_base import Base
from bipatch.config_stack import Settings
from bipatch.patch import PatchError
from bipatch.patch_applier import Applier
from bipatch.patch_envelope import Inflater
from bipatch.patch_stream import Stream

log = logging.getLogger(__name__)


class PatchMixin:
    settings: Settings

    def apply_patch(self, patch: Path, older: Path, output: Path) -> int:
        start = time.monotonic()
        chunk_size = self.settings.chunk_size

        with (
            patch.open("rb") as patch_file,
            older.open("rb") as base,
            output.open("wb") as out,
        ):
            inflater = Inflater(patch_file, chunk_size)
            applier = Applier(
                Stream(cast(IO[bytes], inflater)), base, out, chunk_size
            )
            count = applier.apply()

        log.info(f"patch completed in {time.monotonic() - start:.3f}s")
        return count


class Patch(PatchMixin, Base):
    USAGE = "patch PATCH OLDER OUTPUT"
    ARGC = 3

    def run(self) -> None:
        patch, older, output = (self.expanded_path(arg) for arg in self.args)

        try:
            self.apply_patch(patch, older, output)
        except (OSError, PatchError) as e:
            self.fatal(e)

        self.exit(0)
