import csv
from datetime import datetime
from pathlib import Path

import pytest

from export.config import ExportConfig
from export.csv_writer import CsvResultWriter
from shared.exceptions import CsvWriteError


def read_rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_writes_header_from_first_record_and_one_row_per_record(csv_writer):
    records = [{"host": "a", "count": "3"}, {"host": "b", "count": "1"}]

    path = csv_writer.write(records)

    assert Path(path).read_text(encoding="utf-8") == "host,count\na,3\nb,1\n"


def test_filename_embeds_second_resolution_timestamp(csv_writer, export_config):
    path = Path(csv_writer.write([{"a": 1}]))

    assert path.parent == Path(export_config.output_directory)
    assert path.name == "splunk_results_20261019_143005.csv"


def test_creates_missing_nested_output_directory(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    writer = CsvResultWriter(ExportConfig(output_directory=str(target)))

    path = writer.write([{"a": 1}])

    assert target.is_dir()
    assert Path(path).exists()


def test_missing_and_null_values_render_empty(csv_writer):
    records = [
        {"host": "a", "count": "3", "source": "syslog"},
        {"host": "b", "source": None},
        {"count": "7", "extra": "ignored"},
    ]

    rows = read_rows(csv_writer.write(records))

    assert rows == [
        ["host", "count", "source"],
        ["a", "3", "syslog"],
        ["b", "", ""],
        ["", "7", ""],
    ]


def test_values_are_converted_to_text(csv_writer):
    records = [{"n": 3, "f": 1.5, "ok": True, "no": False, "mv": ["x", "y"], "obj": {"k": 1}}]

    rows = read_rows(csv_writer.write(records))

    assert rows[1] == ["3", "1.5", "true", "false", '["x","y"]', '{"k":1}']


def test_fields_with_delimiters_are_quoted(csv_writer):
    records = [{"_raw": 'GET /a,b "quoted"', "host": "a"}]

    path = csv_writer.write(records)

    assert read_rows(path)[1] == ['GET /a,b "quoted"', "a"]
    assert '"GET /a,b ""quoted"""' in Path(path).read_text(encoding="utf-8")


def test_quote_all_quotes_every_field(tmp_path):
    config = ExportConfig(output_directory=str(tmp_path), quote_all=True)
    writer = CsvResultWriter(config, clock=lambda: datetime(2026, 1, 1))

    path = writer.write([{"host": "a", "count": "3"}])

    assert Path(path).read_text(encoding="utf-8") == '"host","count"\n"a","3"\n'


@pytest.mark.parametrize("records", [None, []])
def test_no_records_creates_empty_file(csv_writer, records):
    path = Path(csv_writer.write(records))

    assert path.exists()
    assert path.stat().st_size == 0


def test_same_second_writes_do_not_overwrite(csv_writer):
    first = csv_writer.write([{"run": "1"}])
    second = csv_writer.write([{"run": "2"}])
    third = csv_writer.write([])

    assert Path(first).name == "splunk_results_20261019_143005.csv"
    assert Path(second).name == "splunk_results_20261019_143005_1.csv"
    assert Path(third).name == "splunk_results_20261019_143005_2.csv"
    assert read_rows(first) == [["run"], ["1"]]
    assert read_rows(second) == [["run"], ["2"]]


def test_write_payload_extracts_records(csv_writer):
    payload = {"preview": False, "rows": [{"host": "a"}]}

    assert read_rows(csv_writer.write_payload(payload)) == [["host"], ["a"]]


def test_write_payload_with_unrecognized_shape_writes_empty_file(csv_writer):
    path = Path(csv_writer.write_payload({"fields": ["a"]}))

    assert path.exists()
    assert path.read_text(encoding="utf-8") == ""


def test_uncreatable_directory_raises_write_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    writer = CsvResultWriter(ExportConfig(output_directory=str(blocker / "out")))

    with pytest.raises(CsvWriteError) as exc:
        writer.write([{"a": 1}])

    assert isinstance(exc.value.__cause__, OSError)


def test_io_failure_during_write_raises_and_removes_partial_file(csv_writer, export_config, monkeypatch):
    def broken_write_rows(handle, records):
        handle.write("host\n")
        raise OSError("disk full")

    monkeypatch.setattr(csv_writer, "_write_rows", broken_write_rows)

    with pytest.raises(CsvWriteError, match="disk full"):
        csv_writer.write([{"host": "a"}])

    assert list(Path(export_config.output_directory).iterdir()) == []


def test_scalar_result_list_writes_empty_file(csv_writer, export_config):
    path = Path(csv_writer.write(["a", "b"]))

    assert path.read_text(encoding="utf-8") == ""
    assert list(Path(export_config.output_directory).iterdir()) == [path]


def test_mixed_result_list_skips_non_mappings(csv_writer):
    records = ["banner", {"host": "a", "count": "3"}, 7, None, {"host": "b"}]

    rows = read_rows(csv_writer.write(records))

    assert rows == [["host", "count"], ["a", "3"], ["b", ""]]


def test_unexpected_failure_removes_file_and_propagates(csv_writer, export_config, monkeypatch):
    def broken_write_rows(handle, records):
        handle.write("host\n")
        raise ValueError("bad record")

    monkeypatch.setattr(csv_writer, "_write_rows", broken_write_rows)

    with pytest.raises(ValueError, match="bad record"):
        csv_writer.write([{"host": "a"}])

    assert list(Path(export_config.output_directory).iterdir()) == []
