"""
End-to-End Test: vertica_reader command line

Runs vertica_reader.main() against synthesized native files.
"""

import gzip
import json
import os
import sys
from datetime import datetime, timezone

import pyarrow.parquet as pq
import pytest

# Import project modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import vertica_reader  # noqa: E402
from vertica_reader import default_output_path, main  # noqa: E402


@pytest.mark.e2e
class TestCommandLine:
    """Command line conversions and error handling."""

    def test_csv_default_output_name(self, basic_file):
        bin_path, types_path = basic_file

        assert main([str(bin_path), "-t", str(types_path)]) == 0

        out_path = bin_path.with_suffix(".csv")
        assert out_path.read_text(encoding="utf-8") == 'IntCol,Name,Flag\n42,ab,1\n,"x,y",0\n-7,,\n'

    def test_csv_to_stdout(self, basic_file, capsys):
        bin_path, types_path = basic_file

        assert main([str(bin_path), "-t", str(types_path), "-o", "-", "-n", "-d", ";", "-l", "1"]) == 0

        assert capsys.readouterr().out == "42;ab;1\n"

    def test_single_quotes(self, basic_file, capsys):
        bin_path, types_path = basic_file

        assert main([str(bin_path), "-t", str(types_path), "-o", "-", "-n", "-s"]) == 0

        assert capsys.readouterr().out.splitlines()[1] == ",'x,y',0"

    def test_json(self, basic_file, temp_output_dir):
        bin_path, types_path = basic_file
        out_path = temp_output_dir / "out.json"

        assert main([str(bin_path), "-t", str(types_path), "-j", "-o", str(out_path)]) == 0

        data = json.loads(out_path.read_text(encoding="utf-8"))
        assert data[0] == {"IntCol": 42, "Name": "ab", "Flag": True}
        assert len(data) == 3

    def test_json_lines_gzip(self, basic_file, temp_output_dir):
        bin_path, types_path = basic_file
        out_path = temp_output_dir / "out.jsonl.gz"

        assert main([str(bin_path), "-t", str(types_path), "-J", "-g", "-o", str(out_path)]) == 0

        with gzip.open(out_path, "rt", encoding="utf-8") as f:
            lines = f.read().splitlines()
        assert len(lines) == 3
        assert json.loads(lines[2]) == {"IntCol": -7, "Name": None, "Flag": None}

    def test_parquet(self, basic_file, temp_output_dir):
        bin_path, types_path = basic_file
        out_path = temp_output_dir / "out.parquet"

        assert main([str(bin_path), "-t", str(types_path), "-P", "-o", str(out_path)]) == 0

        table = pq.read_table(out_path)
        assert table.column_names == ["IntCol", "Name", "Flag"]
        assert table.column("IntCol").to_pylist() == [42, None, -7]

    def test_hex_prefix_and_tz_offset(self, native_builder, write_native_file, capsys):
        builder = native_builder("Varbinary/Raw\nTimestampTz/At\n")
        builder.add_group([b"\x0a\x0b", datetime(2020, 1, 1, tzinfo=timezone.utc)])
        bin_path, types_path = write_native_file(builder, "hex")

        argv = [str(bin_path), "-t", str(types_path), "-o", "-", "-n", "-H", "-z", "-3"]
        assert main(argv) == 0

        assert capsys.readouterr().out == "0x0A0B,2019-12-31 21:00:00-03\n"

    def test_default_output_path(self):
        assert default_output_path("/data/x.bin", "csv", False) == "/data/x.csv"
        assert default_output_path("/data/x.bin", "jsonl", True) == "/data/x.jsonl.gz"
        assert default_output_path("/data/x.bin", "parquet", True) == "/data/x.parquet"

    def test_refuses_to_overwrite_input(self, basic_file):
        bin_path, types_path = basic_file
        before = bin_path.read_bytes()

        assert main([str(bin_path), "-t", str(types_path), "-o", str(bin_path)]) == 1
        assert bin_path.read_bytes() == before

    def test_bad_types_file(self, basic_file, tmp_path):
        bin_path, _ = basic_file
        bad = tmp_path / "bad.types"
        bad.write_text("Integer/a\nWhat/b\n", encoding="utf-8")

        assert main([str(bin_path), "-t", str(bad), "-o", "-"]) == 1

    def test_missing_input(self, tmp_path, basic_file):
        _, types_path = basic_file
        assert main([str(tmp_path / "missing.bin"), "-t", str(types_path), "-o", "-"]) == 1

    def test_not_a_native_file(self, tmp_path, basic_file):
        _, types_path = basic_file
        junk = tmp_path / "junk.bin"
        junk.write_bytes(b"hello world, not native")

        assert main([str(junk), "-t", str(types_path), "-o", "-"]) == 1

    @pytest.mark.parametrize("name,value", [("VNPARSER_LOG_LEVEL", "bogus"), ("VNPARSER_HEX_PREFIX", "maybe")])
    def test_bad_environment_value(self, basic_file, monkeypatch, caplog, name, value):
        bin_path, types_path = basic_file
        monkeypatch.setenv(name, value)

        assert main([str(bin_path), "-t", str(types_path), "-o", "-"]) == 1
        assert name in caplog.text

    def test_argument_errors(self, basic_file):
        bin_path, types_path = basic_file
        with pytest.raises(SystemExit) as excinfo:
            main([str(bin_path)])
        assert excinfo.value.code == 2

        with pytest.raises(SystemExit):
            main([str(bin_path), "-t", str(types_path), "-j", "-J"])
        with pytest.raises(SystemExit):
            main([str(bin_path), "-t", str(types_path), "-l", "-1"])
        with pytest.raises(SystemExit):
            main([str(bin_path), "-t", str(types_path), "-d", "ab"])

    def test_parquet_gzip_warns(self, basic_file, temp_output_dir):
        bin_path, types_path = basic_file
        out_path = temp_output_dir / "warn.parquet"

        with pytest.warns(UserWarning):
            assert vertica_reader.main(
                [str(bin_path), "-t", str(types_path), "-P", "-g", "-o", str(out_path)]
            ) == 0

        print("✓ Command line tests passed")
