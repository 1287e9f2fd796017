"""Test the hilbertgen and hilbertbench entry points.

Tests for pseudo_hilbert.scripts:
    - hilbertgen renders to stdout and to files (text and PNG)
    - Command-line flags override config files, which may be partial
    - PNG output honours coord_bits; main() closes its log handlers
    - Usage errors exit with status 2
    - hilbertbench runs from flags and from a config file, checks coord_bits

Run:
    pytest tests/test_scripts.py -v
"""

import argparse
import json
import logging

import numpy as np
import pytest
from PIL import Image

from pseudo_hilbert.scripts import hilbertbench, hilbertgen
from scan_checks import GOLDEN_4X4


class TestHilbertgen:
    def test_ascii_to_stdout(self, capsys):
        assert hilbertgen.main(["4", "4", "--algorithm", "zhang"]) == 0
        out = capsys.readouterr().out
        assert out == ",-, ,-,\n| '-' |\n'-, ,-'\n--' '--\n"

    def test_json_to_stdout(self, capsys):
        assert hilbertgen.main(["4", "4", "-f", "json"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert [tuple(json.loads(line)) for line in lines] == GOLDEN_4X4

    def test_csv_to_file(self, tmp_path, capsys):
        out_path = tmp_path / "out" / "scan.csv"
        assert hilbertgen.main(["3", "2", "-f", "csv", "-o", str(out_path)]) == 0
        assert capsys.readouterr().out == ""
        assert out_path.read_text() == "x,y\n0,0\n0,1\n1,1\n1,0\n2,0\n2,1\n"

    def test_svg_scale(self, tmp_path):
        out_path = tmp_path / "scan.svg"
        assert hilbertgen.main(["2", "1", "-f", "svg", "--scale", "4", "-o", str(out_path)]) == 0
        assert 'd="M2 2 L6 2"' in out_path.read_text()

    def test_png(self, tmp_path):
        out_path = tmp_path / "scan.png"
        assert hilbertgen.main(["10", "6", "-f", "png", "-o", str(out_path)]) == 0
        image = np.array(Image.open(out_path))
        assert image.shape == (6, 10)
        assert image.min() == 0 and image.max() == 255

    def test_png_without_output_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            hilbertgen.main(["4", "4", "-f", "png"])
        assert exc_info.value.code == 2

    def test_missing_size_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            hilbertgen.main([])
        assert exc_info.value.code == 2
        assert "WIDTH and HEIGHT" in capsys.readouterr().err

    def test_flags_override_config(self, tmp_path, capsys):
        cfg_path = tmp_path / "gen.yaml"
        cfg_path.write_text(
            "scan: {width: 50, height: 50, algorithm: zhang}\n"
            "output: {format: svg}\n"
        )
        assert hilbertgen.main(["--config", str(cfg_path), "3", "2", "-f", "tsv"]) == 0
        out = capsys.readouterr().out
        # zhang from the file, size and format from the command line
        assert out == "x\ty\n0\t0\n1\t0\n2\t0\n2\t1\n1\t1\n0\t1\n"

    def test_config_without_scan_section_takes_size_from_flags(self, tmp_path, capsys):
        cfg_path = tmp_path / "gen.yaml"
        cfg_path.write_text("output: {format: csv}\n")
        assert hilbertgen.main(["--config", str(cfg_path), "3", "2"]) == 0
        assert capsys.readouterr().out == "x,y\n0,0\n0,1\n1,1\n1,0\n2,0\n2,1\n"

    def test_png_config_takes_path_from_flags(self, tmp_path, monkeypatch):
        cfg_path = tmp_path / "gen.yaml"
        cfg_path.write_text("scan: {width: 5, height: 4}\noutput: {format: png}\n")
        monkeypatch.chdir(tmp_path)
        assert hilbertgen.main(["--config", str(cfg_path), "-o", "a.png"]) == 0
        assert np.array(Image.open(tmp_path / "a.png")).shape == (4, 5)

    def test_config_missing_size_is_usage_error(self, tmp_path, capsys):
        cfg_path = tmp_path / "gen.yaml"
        cfg_path.write_text("output: {format: csv}\n")
        with pytest.raises(SystemExit) as exc_info:
            hilbertgen.main(["--config", str(cfg_path)])
        assert exc_info.value.code == 2
        assert "width" in capsys.readouterr().err

    def test_missing_config_file_is_usage_error(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            hilbertgen.main(["--config", str(tmp_path / "missing.yaml"), "2", "2"])
        assert exc_info.value.code == 2
        assert "not found" in capsys.readouterr().err

    def test_png_respects_coord_bits(self, tmp_path, capsys):
        cfg_path = tmp_path / "gen.yaml"
        cfg_path.write_text("scan: {width: 300, height: 2, coord_bits: 8}\n")
        out_path = tmp_path / "scan.png"
        with pytest.raises(SystemExit) as exc_info:
            hilbertgen.main(["--config", str(cfg_path), "-f", "png", "-o", str(out_path)])
        assert exc_info.value.code == 2
        assert not out_path.exists()

    def test_png_generate_checks_coord_bits(self, tmp_path):
        cfg = hilbertgen.GenerateConfig.model_validate(
            {"scan": {"width": 6, "height": 4}, "output": {"format": "png", "path": str(tmp_path / "x.png")}}
        )
        # Bypass validation to reach the renderer with a too-narrow width.
        cfg.scan.coord_bits = 2
        with pytest.raises(ValueError, match="2-bit"):
            hilbertgen.generate(cfg)
        assert not (tmp_path / "x.png").exists()

    def test_main_closes_its_log_file(self, tmp_path, capsys):
        cfg_path = tmp_path / "gen.yaml"
        log_file = tmp_path / "logs" / "gen.log"
        cfg_path.write_text(
            "scan: {width: 4, height: 4}\n"
            f"logging: {{log_level: INFO, log_file: '{log_file}', "
            "rotate: {mode: size, max_bytes: 100000, backup_count: 1}}\n"
        )
        assert hilbertgen.main(["--config", str(cfg_path), "-o", str(tmp_path / "scan.txt")]) == 0
        root = logging.getLogger()
        assert not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == str(log_file)
            for h in root.handlers
        )
        assert "Wrote ascii output" in log_file.read_text()

    def test_invalid_config_is_usage_error(self, tmp_path):
        cfg_path = tmp_path / "gen.yaml"
        cfg_path.write_text("scan: {width: 4, height: 4, algorithm: peano}\n")
        with pytest.raises(SystemExit) as exc_info:
            hilbertgen.main(["--config", str(cfg_path)])
        assert exc_info.value.code == 2

    def test_resolve_config_without_file(self):
        args = hilbertgen.build_parser().parse_args(["7", "9", "-a", "zhang"])
        cfg = hilbertgen.resolve_config(args)
        assert cfg.scan.size == (7, 9)
        assert cfg.scan.algorithm == "zhang"
        assert cfg.output.format == "ascii"

    def test_generate_returns_text(self):
        args = hilbertgen.build_parser().parse_args(["2", "1"])
        assert hilbertgen.generate(hilbertgen.resolve_config(args)) == "---\n"


class TestHilbertbench:
    def test_parse_size(self):
        assert hilbertbench.parse_size("114x514") == (114, 514)
        assert hilbertbench.parse_size("4X4") == (4, 4)

    @pytest.mark.parametrize("text", ["4", "axb", "4x4x4"])
    def test_parse_size_rejects(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            hilbertbench.parse_size(text)

    def test_scan_checksum(self):
        # sum of x + y over every cell of a 4x4 grid
        assert hilbertbench.scan_checksum((4, 4), "zhang") == 48
        assert hilbertbench.scan_checksum((4, 4), "zhang-arb") == 48

    def test_main_from_flags(self, capsys):
        argv = ["--size", "8x8", "--size", "12x3", "-a", "zhang", "-r", "2"]
        assert hilbertbench.main(argv) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 3
        assert "8x8" in lines[1] and "zhang" in lines[1]
        assert "12x3" in lines[2]

    def test_main_from_config(self, tmp_path, capsys):
        cfg_path = tmp_path / "bench.yaml"
        cfg_path.write_text(
            "cases:\n  - {width: 5, height: 5}\n"
            "algorithms: [zhang-arb]\n"
            "repeats: 1\n"
        )
        assert hilbertbench.main(["--config", str(cfg_path)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert "zhang-arb" in lines[1]

    def test_run_benchmarks_rows(self):
        cfg = hilbertbench.BenchConfig.model_validate(
            {"cases": [{"width": 4, "height": 4}], "algorithms": ["zhang"], "repeats": 3}
        )
        (row,) = hilbertbench.run_benchmarks(cfg)
        assert row["size"] == (4, 4)
        assert row["checksum"] == 48
        assert row["repeats"] == 3
        assert 0 <= row["best_s"] <= row["mean_s"]

    def test_invalid_repeats_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            hilbertbench.main(["-r", "0"])
        assert exc_info.value.code == 2

    def test_size_beyond_coord_bits_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            hilbertbench.main(["--size", "4294967296x1"])
        assert exc_info.value.code == 2
        assert "32 bits" in capsys.readouterr().err

    def test_coord_bits_from_config(self, tmp_path):
        cfg_path = tmp_path / "bench.yaml"
        cfg_path.write_text("coord_bits: 8\n")
        with pytest.raises(SystemExit) as exc_info:
            hilbertbench.main(["--config", str(cfg_path), "--size", "256x2"])
        assert exc_info.value.code == 2
        assert hilbertbench.main(["--config", str(cfg_path), "--size", "255x2", "-r", "1"]) == 0

    def test_flags_merge_into_partial_config(self, tmp_path, capsys):
        cfg_path = tmp_path / "bench.yaml"
        cfg_path.write_text("repeats: 1\nlogging: {json: true}\n")
        argv = ["--config", str(cfg_path), "--size", "3x3", "-a", "zhang", "--log-level", "ERROR"]
        assert hilbertbench.main(argv) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2 and "3x3" in lines[1]
