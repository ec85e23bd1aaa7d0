from __future__ import annotations

from pathlib import Path
from typing import (
    MutableMapping,
    TextIO,
    Type,
)

from bipatch.cmd_base import Base
from bipatch.cmd_cycle import Cycle
from bipatch.cmd_diff import Diff
from bipatch.cmd_info import Info
from bipatch.cmd_patch import Patch


class Command:
    class Unknown(Exception):
        pass

    COMMANDS: dict[str, Type[Base]] = {
        "diff": Diff,
        "patch": Patch,
        "cycle": Cycle,
        "info": Info,
    }

    @staticmethod
    def execute(
        _dir: Path,
        env: MutableMapping[str, str],
        argv: list[str],
        stdin: TextIO,
        stdout: TextIO,
        stderr: TextIO,
    ) -> Base:
        if len(argv) < 2:
            raise Command.Unknown("usage: bipatch diff|patch|cycle|info")

        name = argv[1]
        args = argv[2:]

        if name not in Command.COMMANDS:
            raise Command.Unknown(f"{name} is not a bipatch command")

        cmd_class = Command.COMMANDS[name]
        cmd: Base = cmd_class(_dir, env, args, stdin, stdout, stderr)
        cmd.execute()

        return cmd
