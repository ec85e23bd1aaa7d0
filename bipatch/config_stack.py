from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from bipatch.config import ConfigFile, ConfigValue
from bipatch.patch import CHUNK_SIZE, COMPRESSION_LEVEL

GLOBAL_CONFIG = Path("~/.bipatchconfig")
SYSTEM_CONFIG = Path("/etc/bipatchconfig")

DEFAULT_LOG_LEVEL = "WARNING"


class ConfigError(Exception):
    pass


@dataclass
class Settings:
    level: int = COMPRESSION_LEVEL
    chunk_size: int = CHUNK_SIZE
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[Path] = None


class ConfigStack:
    def __init__(self, env: Mapping[str, str]) -> None:
        self.env = env
        global_path = env.get("BIPATCH_CONFIG") or GLOBAL_CONFIG
        self.configs = {
            "global": ConfigFile(Path(global_path).expanduser()),
            "system": ConfigFile(SYSTEM_CONFIG),
        }

    def get(self, key: Sequence[str]) -> ConfigValue | None:
        try:
            return self.get_all(key)[-1]
        except IndexError:
            return None

    def get_all(self, key: Sequence[str]) -> list[ConfigValue]:
        values: list[ConfigValue] = []
        for name in ("system", "global"):
            values.extend(self.configs[name].get_all(key))
        return values

    def settings(self) -> Settings:
        settings = Settings()

        level = self.get(["core", "level"])
        if level is not None:
            settings.level = self.integer("core.level", level, 0, 9)

        chunk_size = self.get(["core", "chunksize"])
        if chunk_size is not None:
            settings.chunk_size = self.integer("core.chunksize", chunk_size, 1)

        log_level = self.env.get("BIPATCH_LOG_LEVEL") or self.get(["log", "level"])
        if log_level is not None:
            settings.log_level = self.log_level(str(log_level))

        log_file = self.env.get("BIPATCH_LOG_FILE") or self.get(["log", "file"])
        if log_file:
            settings.log_file = Path(str(log_file)).expanduser()

        return settings

    @staticmethod
    def integer(
        name: str, value: ConfigValue, low: int, high: Optional[int] = None
    ) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"bad numeric config value '{value}' for '{name}'")
        if value < low or (high is not None and value > high):
            raise ConfigError(f"config value for '{name}' out of range: {value}")
        return value

    @staticmethod
    def log_level(value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigError(f"unknown log level '{value}'")
        return level
