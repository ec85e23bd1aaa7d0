from __future__ import annotations

from typing import IO, cast

from bipatch.cmd_base import Base
from bipatch.patch import PatchError
from bipatch.patch_envelope import Inflater
from bipatch.patch_reader import Reader
from bipatch.patch_stream import Stream


class Info(Base):
    USAGE = "info PATCH"
    ARGC = 1

    def run(self) -> None:
        path = self.expanded_path(self.args[0])

        try:
            with path.open("rb") as f:
                chunk_size = self.settings.chunk_size
                stream = Stream(cast(IO[bytes], Inflater(f, chunk_size)))
                self.summarize(Reader(stream, chunk_size), path.stat().st_size)
        except (OSError, PatchError) as e:
            self.fatal(e)

        self.exit(0)

    def summarize(self, reader: Reader, patch_size: int) -> None:
        add_bytes = copy_bytes = seeks = 0

        for record in reader.scan():
            add_bytes += record.add_len
            copy_bytes += record.copy_len
            if record.seek != 0:
                seeks += 1

        self.println(f"Patch size:   {patch_size:,} bytes")
        self.println(f"Records:      {reader.count}")
        self.println(f"  Adds:       {add_bytes:,} bytes")
        self.println(f"  Copies:     {copy_bytes:,} bytes")
        self.println(f"  Seeks:      {seeks}")
        self.println(f"Output size:  {add_bytes + copy_bytes:,} bytes")
