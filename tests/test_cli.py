"""Tests for the command line interface."""
import numpy as np
import pytest
from PIL import Image

from mipsdf.cli import create_parser, main


class TestParser:
    """Test argument parsing."""

    def test_defaults(self):
        parsed = create_parser().parse_args(["in.png", "out.png"])

        assert parsed.size is None
        assert parsed.maxdst is None
        assert parsed.type == "png"
        assert parsed.workers == 1
        assert not parsed.verbose
        assert not parsed.no_prune

    def test_rejects_unknown_type(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["-t", "jpeg", "in.png", "out.png"])


class TestMain:
    """Test the CLI entry point."""

    def test_no_arguments_prints_usage(self, capsys):
        assert main([]) == 0
        assert "usage: mipsdf" in capsys.readouterr().out

    def test_png_output(self, glyph_path, tmp_path):
        out = tmp_path / "sdf.png"

        assert main([str(glyph_path), str(out), "-s", "16", "--maxdst", "8"]) == 0

        with Image.open(out) as img:
            assert img.size == (16, 16)
            gray = np.array(img)
        # Corner is far outside the bar, centre of the bar is deep inside
        assert gray[0, 0] == 254
        assert gray.min() < 127

    @pytest.mark.parametrize("output_type,itemsize", [("u16", 2), ("f32", 4), ("f64", 8)])
    def test_raw_outputs(self, glyph_path, tmp_path, output_type, itemsize):
        out = tmp_path / f"sdf.{output_type}"

        assert main([str(glyph_path), str(out), "-s", "16", "-t", output_type]) == 0

        assert out.stat().st_size == 16 * 16 * itemsize

    def test_png16_output(self, glyph_path, tmp_path):
        out = tmp_path / "sdf16.png"

        assert main([str(glyph_path), str(out), "-s", "8", "-t", "png16"]) == 0

        with Image.open(out) as img:
            assert img.size == (8, 8)
            assert int(np.array(img).max()) == 65534

    def test_f64_matches_unpruned(self, glyph_path, tmp_path):
        pruned = tmp_path / "pruned.f64"
        unpruned = tmp_path / "unpruned.f64"

        assert main([str(glyph_path), str(pruned), "-s", "8", "-t", "f64"]) == 0
        assert main([str(glyph_path), str(unpruned), "-s", "8", "-t", "f64", "--no-prune"]) == 0

        assert pruned.read_bytes() == unpruned.read_bytes()

    def test_save_mipmaps(self, glyph_path, tmp_path):
        out = tmp_path / "sdf.png"
        basename = tmp_path / "mips" / "level"

        assert main([str(glyph_path), str(out), "-s", "8", "--save-mipmaps", str(basename)]) == 0

        assert sorted(p.name for p in (tmp_path / "mips").iterdir()) == [
            f"level{k}.png" for k in range(7)
        ]

    def test_creates_output_directory(self, glyph_path, tmp_path):
        out = tmp_path / "nested" / "dir" / "sdf.png"

        assert main([str(glyph_path), str(out), "-s", "8"]) == 0
        assert out.exists()

    def test_single_argument_prints_usage(self, capsys):
        assert main(["only_input.png"]) == 0
        assert "usage: mipsdf" in capsys.readouterr().out

    def test_maxdst_help_names_units(self):
        maxdst = next(a for a in create_parser()._actions if a.dest == "maxdst")
        assert "whole pixels" in maxdst.help
        assert "not half pixels" in maxdst.help

    def test_invalid_size_writes_no_mipmaps(self, glyph_path, tmp_path):
        basename = tmp_path / "mips" / "level"

        assert main([str(glyph_path), str(tmp_path / "out.png"), "-s", "12",
                     "--save-mipmaps", str(basename)]) == 1

        assert not (tmp_path / "mips").exists()

    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.png"), str(tmp_path / "out.png")]) == 1
        assert "Input file not found" in capsys.readouterr().err

    def test_invalid_size(self, glyph_path, tmp_path, capsys):
        assert main([str(glyph_path), str(tmp_path / "out.png"), "-s", "12"]) == 1
        assert "power of two" in capsys.readouterr().err

    def test_invalid_saturation(self, glyph_path, tmp_path, capsys):
        assert main([str(glyph_path), str(tmp_path / "out.png"), "--maxdst", "0"]) == 1
        assert "Error" in capsys.readouterr().err
