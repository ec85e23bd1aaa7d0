from io import BytesIO

import pytest

from bipatch.patch import Control, CorruptPatch, NextRecord
from bipatch.patch_reader import Reader
from bipatch.patch_stream import Stream
from tests.conftest import encode


def reader_of(data: bytes, chunk_size: int = 4) -> Reader:
    return Reader(Stream(BytesIO(data)), chunk_size)


class TestEncoding:
    def test_lays_out_fields_in_fixed_order(self) -> None:
        assert encode([Control(b"\x01\x02", b"xyz", -3)]) == b"\x02\x01\x02\x03xyz\x05"

    def test_degenerate_record_is_three_zero_bytes(self) -> None:
        assert encode([Control()]) == b"\x00\x00\x00"

    def test_writer_concatenates_records_without_framing(self) -> None:
        controls = [Control(b"a", b"", 1), Control(b"", b"bc", 0), Control()]
        assert encode(controls) == b"".join(encode([c]) for c in controls)

    def test_encoding_is_deterministic(self) -> None:
        controls = [Control(bytes(range(200)), b"tail", -100), Control(b"", b"", 7)]
        assert encode(controls) == encode(list(controls))

    def test_writer_counts_records_and_bytes(self) -> None:
        from bipatch.patch_writer import Writer

        output = BytesIO()
        writer = Writer(output)
        count = writer.write_controls([Control(b"ab", b"c", 2), Control()])

        assert count == 2
        assert writer.offset == len(output.getvalue()) == 9


class TestDecoding:
    def test_reads_back_record_lengths_and_seeks(self) -> None:
        controls = [
            Control(b"\x00" * 10, b"", 4),
            Control(b"", b"literal bytes", -2),
            Control(),
        ]
        reader = reader_of(encode(controls))

        assert list(reader.scan()) == [
            NextRecord(10, 0, 4),
            NextRecord(0, 13, -2),
            NextRecord(0, 0, 0),
        ]
        assert reader.count == 3
        assert reader.at_end()

    def test_empty_stream_has_no_records(self) -> None:
        reader = reader_of(b"")
        assert reader.at_end()
        assert list(reader.scan()) == []

    def test_scan_reports_lengths_without_materializing(self) -> None:
        controls = [Control(b"x" * 9, b"y" * 3, -1), Control(b"", b"z", 5)]
        reader = reader_of(encode(controls), chunk_size=2)

        assert list(reader.scan()) == [NextRecord(9, 3, -1), NextRecord(0, 1, 5)]

    @pytest.mark.parametrize(
        "data, phase",
        [
            (b"\x80", "add_len"),
            (b"\x03ab", "add"),
            (b"\x00", "copy_len"),
            (b"\x00\x02a", "copy"),
            (b"\x00\x00", "seek"),
            (b"\x00\x00\x80", "seek"),
        ],
    )
    def test_names_the_phase_of_a_truncated_record(
        self, data: bytes, phase: str
    ) -> None:
        with pytest.raises(CorruptPatch) as excinfo:
            list(reader_of(data).scan())

        assert excinfo.value.phase == phase

    def test_rejects_oversized_lengths(self) -> None:
        with pytest.raises(CorruptPatch) as excinfo:
            list(reader_of(b"\xff" * 10 + b"\x01").scan())

        assert excinfo.value.phase == "add_len"
