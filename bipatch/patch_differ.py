from __future__ import annotations

from collections import defaultdict
from typing import Iterator

from bipatch.patch import Control

MAX_CANDIDATES: int = 64


class Differ:
    BLOCK_SIZE = 16

    def __init__(self, source: bytes, index: dict[bytes, list[int]]) -> None:
        self.source = source
        self.index = index

    @staticmethod
    def create_index(source: bytes) -> Differ:
        blocks = len(source) // Differ.BLOCK_SIZE
        index: dict[bytes, list[int]] = defaultdict(list)

        for i in range(blocks):
            offset = i * Differ.BLOCK_SIZE
            _slice = source[offset : offset + Differ.BLOCK_SIZE]

            if len(index[_slice]) < MAX_CANDIDATES:
                index[_slice].append(offset)

        return Differ(source, index)

    @staticmethod
    def diff(source: bytes, target: bytes) -> Iterator[Control]:
        return Differ.create_index(source).compress(target)

    def compress(self, target: bytes) -> Iterator[Control]:
        """
        Yields controls that rebuild *target* from the indexed source.

        Each control carries the residual of one matched region, the
        literal bytes up to the next match, and the seek from the end of
        this match to the start of the next one.
        """
        self.target = target
        self.offset = 0

        # the previous match, as (source offset, target offset, size)
        prev = (0, 0, 0)

        while self.offset < len(self.target):
            match = self.next_match(prev[1] + prev[2])
            if match is None:
                break

            yield from self.emit(prev, match[1], match[0])
            prev = match

        yield from self.emit(prev, len(self.target), prev[0] + prev[2])

    def emit(
        self, prev: tuple[int, int, int], literal_end: int, next_source: int
    ) -> Iterator[Control]:
        m_source, m_target, m_size = prev
        literal_start = m_target + m_size

        add = self.residual(m_source, m_target, m_size)
        copy = self.target[literal_start:literal_end]
        seek = next_source - (m_source + m_size)

        if add or copy or seek:
            yield Control(add, copy, seek)

    def residual(self, s: int, t: int, size: int) -> bytes:
        return bytes(
            (self.target[t + i] - self.source[s + i]) & 0xFF for i in range(size)
        )

    def next_match(self, literal_start: int) -> tuple[int, int, int] | None:
        while self.offset < len(self.target):
            m_offset, m_size = self.longest_match()

            if m_size == 0:
                self.offset += 1
                continue

            m_offset, m_size = self.expand_match(m_offset, m_size, literal_start)
            m_size = self.extend_match(m_offset, m_size)

            self.offset += m_size
            return (m_offset, self.offset - m_size, m_size)

        return None

    def longest_match(self) -> tuple[int, int]:
        _slice = self.target[self.offset : self.offset + Differ.BLOCK_SIZE]
        if len(_slice) < Differ.BLOCK_SIZE or _slice not in self.index:
            return (0, 0)

        m_offset = m_size = 0

        for pos in self.index[_slice]:
            remaining = self.remaining_bytes(pos)
            if remaining <= m_size:
                continue

            s = self.match_from(pos, remaining)
            if m_size >= s - pos:
                continue

            m_offset = pos
            m_size = s - pos

        return (m_offset, m_size)

    def remaining_bytes(self, pos: int) -> int:
        source_remaining = len(self.source) - pos
        target_remaining = len(self.target) - self.offset

        return min(source_remaining, target_remaining)

    def match_from(self, pos: int, remaining: int) -> int:
        s, t = pos, self.offset

        while remaining > 0 and self.source[s] == self.target[t]:
            s, t = s + 1, t + 1
            remaining -= 1

        return s

    def expand_match(
        self, m_offset: int, m_size: int, literal_start: int
    ) -> tuple[int, int]:
        while (
            self.offset > literal_start
            and m_offset > 0
            and self.source[m_offset - 1] == self.target[self.offset - 1]
        ):
            self.offset -= 1
            m_offset -= 1
            m_size += 1

        return (m_offset, m_size)

    def extend_match(self, m_offset: int, m_size: int) -> int:
        """
        Grow an exact match forward over bytes that mostly agree, keeping
        the longest extension in which at least half the bytes match.
        """
        s = m_offset + m_size
        t = self.offset + m_size
        limit = min(len(self.source) - s, len(self.target) - t)

        score = best_score = best_size = 0

        for i in range(limit):
            if self.source[s + i] == self.target[t + i]:
                score += 1
            else:
                score -= 1

            if score > best_score:
                best_score, best_size = score, i + 1
            elif score < best_score - self.BLOCK_SIZE:
                break

        return m_size + best_size
