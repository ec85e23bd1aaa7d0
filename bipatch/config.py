from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Pattern, Sequence, TextIO, TypeAlias

ConfigValue: TypeAlias = bool | int | str

SECTION_LINE: Pattern[str] = re.compile(
    r'^\s*\[([a-z0-9-]+)( "(.+)")?\]\s*(?:$|#|;)', re.I
)
VARIABLE_LINE: Pattern[str] = re.compile(
    r"^\s*([a-z][a-z0-9-]*)\s*=\s*(.*?)\s*(?:$|#|;)", re.I | re.M
)
BLANK_LINE: Pattern[str] = re.compile(r"^\s*(?:$|#|;)")
INTEGER: Pattern[str] = re.compile(r"^-?[1-9][0-9]*$|^0$")


class ParseError(Exception):
    pass


@dataclass
class Variable:
    name: str
    value: ConfigValue

    @staticmethod
    def normalize(name: Optional[str]) -> Optional[str]:
        return name.lower() if name else None


class ConfigFile:
    def __init__(self, path: Path) -> None:
        self.path: Path = path
        self.variables: dict[tuple[str, str], List[Variable]] = defaultdict(list)
        self.loaded = False
        self.line_count = 0

    def open(self) -> None:
        if not self.loaded:
            self.read_config_file()

    def get(self, key: Sequence[str]) -> ConfigValue | None:
        try:
            return self.get_all(key)[-1]
        except IndexError:
            return None

    def get_all(self, key: Sequence[str]) -> List[ConfigValue]:
        self.open()
        *section, var = list(map(str, key))
        name = self.normalize_section(section)
        normal = Variable.normalize(var)
        return [
            v.value
            for v in self.variables[name]
            if Variable.normalize(v.name) == normal
        ]

    @staticmethod
    def normalize_section(name: Sequence[str]) -> tuple[str, str]:
        if not name:
            return ("", "")
        return (name[0].lower(), ".".join(name[1:]))

    def read_config_file(self) -> None:
        self.variables = defaultdict(list)
        self.line_count = 0
        section: tuple[str, str] = ("", "")

        try:
            with self.path.open("r", encoding="utf-8") as fh:
                while True:
                    try:
                        raw = self.read_line(fh)
                    except EOFError:
                        break
                    self.line_count += 1
                    section = self.parse_line(section, raw)
        except FileNotFoundError:
            pass

        self.loaded = True

    @staticmethod
    def read_line(fh: TextIO) -> str:
        buffer = ""
        while True:
            chunk = fh.readline()
            if chunk == "":
                if buffer:
                    return buffer
                raise EOFError
            buffer += chunk
            if not buffer.endswith("\\\n"):
                return buffer

    def parse_line(self, section: tuple[str, str], line: str) -> tuple[str, str]:
        if m := SECTION_LINE.match(line):
            return self.normalize_section(
                [m.group(1)] + ([m.group(3)] if m.group(3) else [])
            )
        if m := VARIABLE_LINE.match(line):
            variable = Variable(m.group(1), self.parse_value(m.group(2)))
            self.variables[section].append(variable)
            return section
        if BLANK_LINE.match(line):
            return section
        raise ParseError(f"bad config line {self.line_count} in file {self.path}")

    @staticmethod
    def parse_value(value: str) -> ConfigValue:
        lower = value.lower()
        if lower in {"yes", "on", "true"}:
            return True
        if lower in {"no", "off", "false"}:
            return False
        if INTEGER.match(value):
            return int(value)
        return value.replace("\\\n", "")
