import logging
from io import BytesIO, StringIO
from pathlib import Path
from typing import Callable, Iterable, Iterator, Mapping, Protocol, TypeAlias

import pytest

from bipatch import config_stack
from bipatch.cmd_base import Base
from bipatch.command import Command
from bipatch.patch import Control
from bipatch.patch_applier import Applier
from bipatch.patch_writer import Writer

BipatchCmdResult: TypeAlias = tuple[Base, StringIO, StringIO]

WriteFile: TypeAlias = Callable[[str, bytes], Path]
ReadFile: TypeAlias = Callable[[str], bytes]
WriteConfig: TypeAlias = Callable[[str], None]


class BipatchCmd(Protocol):
    def __call__(
        self, *argv: str, env: Mapping[str, str] | None = None
    ) -> BipatchCmdResult: ...


def encode(controls: Iterable[Control]) -> bytes:
    output = BytesIO()
    Writer(output).write_controls(controls)
    return output.getvalue()


def apply(base: bytes, patch: bytes, chunk_size: int = 16) -> bytes:
    output = BytesIO()
    Applier.apply_patch(BytesIO(patch), BytesIO(base), output, chunk_size)
    return output.getvalue()


@pytest.fixture
def work_path(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "bipatchconfig"


@pytest.fixture(autouse=True)
def isolate_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config_path: Path
) -> Iterator[None]:
    monkeypatch.setattr(config_stack, "SYSTEM_CONFIG", tmp_path / "no-system-config")
    monkeypatch.setenv("BIPATCH_CONFIG", str(config_path))
    monkeypatch.delenv("BIPATCH_LOG_LEVEL", raising=False)
    monkeypatch.delenv("BIPATCH_LOG_FILE", raising=False)
    yield


@pytest.fixture
def write_file(work_path: Path) -> WriteFile:
    def _write_file(name: str, contents: bytes) -> Path:
        path = work_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(contents)
        return path

    return _write_file


@pytest.fixture
def read_file(work_path: Path) -> ReadFile:
    def _read_file(name: str) -> bytes:
        return (work_path / name).read_bytes()

    return _read_file


@pytest.fixture
def write_config(config_path: Path) -> WriteConfig:
    def _write_config(text: str) -> None:
        config_path.write_text(text, encoding="utf-8")

    return _write_config


@pytest.fixture
def bipatch_cmd(work_path: Path, config_path: Path) -> BipatchCmd:
    def _bipatch_cmd(
        *argv: str, env: Mapping[str, str] | None = None
    ) -> BipatchCmdResult:
        cmd_env = {"BIPATCH_CONFIG": str(config_path)}
        cmd_env.update(env or {})
        stdout = StringIO()
        stderr = StringIO()
        cmd = Command.execute(
            work_path,
            cmd_env,
            ["bipatch"] + list(argv),
            StringIO(),
            stdout,
            stderr,
        )
        return cmd, stdout, stderr

    return _bipatch_cmd


@pytest.fixture
def root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
