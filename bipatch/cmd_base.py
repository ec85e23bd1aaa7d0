from __future__ import annotations

import io
from functools import cache
from pathlib import Path
from typing import MutableMapping, TextIO

from bipatch.config import ParseError
from bipatch.config_stack import ConfigError, ConfigStack, Settings
from bipatch.setup_logging import setup_logging

USAGE_STATUS = 129
FATAL_STATUS = 128


class Base:
    USAGE: str = ""
    ARGC: int = 0

    def __init__(
        self,
        _dir: Path,
        env: MutableMapping[str, str],
        args: list[str],
        stdin: TextIO,
        stdout: TextIO,
        stderr: TextIO,
    ):
        self.dir: Path = _dir
        self.env: MutableMapping[str, str] = env
        self.args: list[str] = args
        self.stdin: TextIO = stdin
        self.stdout: TextIO = stdout
        self.stderr: TextIO = stderr
        self.status: int | None = None

    @property
    @cache
    def settings(self) -> Settings:
        return ConfigStack(self.env).settings()

    def exit(self, status: int = 0) -> None:
        self.status = status
        raise ExitSignal(self.status)

    def execute(self) -> int:
        try:
            self.configure_logging()
            self.check_args()
            self.run()
            self.status = 0
        except ExitSignal as e:
            self.status = e.status

        self.stdout.flush()
        self.stderr.flush()

        assert self.status is not None
        return self.status

    def configure_logging(self) -> None:
        try:
            settings = self.settings
        except (ConfigError, ParseError) as e:
            self.fatal(e)

        setup_logging(level=settings.log_level, log_file=settings.log_file)

    def check_args(self) -> None:
        if len(self.args) != self.ARGC:
            self.eprintln(f"usage: bipatch {self.USAGE}")
            self.exit(USAGE_STATUS)

    def fatal(self, message: str | Exception) -> None:
        self.eprintln(f"fatal: {message}")
        self.exit(FATAL_STATUS)

    def expanded_path(self, path: str) -> Path:
        return (self.dir / path).absolute()

    def run(self) -> None:
        raise NotImplementedError(f"{self.__class__.__name__}.run() not implemented")

    def println(self, string: str) -> None:
        if isinstance(self.stdout, io.BufferedIOBase):
            self.stdout.write((string + "\n").encode("utf-8"))
        else:
            self.stdout.write(string + "\n")

    def eprintln(self, string: str) -> None:
        if isinstance(self.stderr, io.BufferedIOBase):
            self.stderr.write((string + "\n").encode("utf-8"))
        else:
            self.stderr.write(string + "\n")


class ExitSignal(Exception):
    def __init__(self, status: int = 0) -> None:
        super().__init__(f"Exit with status {status}")
        self.status: int | None = status
