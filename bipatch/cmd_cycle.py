from __future__ import annotations

import hashlib
import math
import tempfile
from pathlib import Path

from bipatch.cmd_base import Base
from bipatch.cmd_diff import DiffMixin
from bipatch.cmd_patch import PatchMixin
from bipatch.patch import PatchError, VerificationMismatch

UNITS = ["B", "KiB", "MiB", "GiB", "TiB"]
SCALE = 1024.0


def format_size(size: int) -> str:
    if size < SCALE:
        return f"{size} B"

    power = min(math.floor(math.log(size, SCALE)), len(UNITS) - 1)
    scaled = size / (SCALE**power)
    return "%.2f %s" % (scaled, UNITS[power])


class Cycle(DiffMixin, PatchMixin, Base):
    USAGE = "cycle OLDER NEWER"
    ARGC = 2

    def run(self) -> None:
        older, newer = (self.expanded_path(arg) for arg in self.args)

        try:
            self.cycle(older, newer)
        except (OSError, PatchError) as e:
            self.fatal(e)

        self.exit(0)

    def cycle(self, older: Path, newer: Path) -> None:
        older_size = older.stat().st_size
        newer_size = newer.stat().st_size

        self.println(
            f"before {format_size(older_size)}, after {format_size(newer_size)}"
        )

        with tempfile.TemporaryDirectory(prefix="bipatch-") as tmp:
            patch = Path(tmp) / "patch"
            fresh = Path(tmp) / "fresh"

            self.write_patch(older, newer, patch)
            self.apply_patch(patch, older, fresh)

            patch_size = patch.stat().st_size
            if newer_size:
                ratio = patch_size / newer_size
                self.println(
                    f"patch size: {format_size(patch_size)} "
                    f"({ratio * 100:.2f}% of newer)"
                )
            else:
                self.println(f"patch size: {format_size(patch_size)}")

            expected = self.file_digest(newer)
            actual = self.file_digest(fresh)

        if actual != expected:
            raise VerificationMismatch(
                f"hash mismatch: expected {expected}, reconstructed {actual}"
            )

        self.println(f"verified sha256 {actual}")

    @staticmethod
    def file_digest(path: Path) -> str:
        with path.open("rb") as f:
            return hashlib.file_digest(f, "sha256").hexdigest()
