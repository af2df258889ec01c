"""Tests for mandel.py: argument parsing and image output."""

import numpy as np
import PIL.Image
import pytest

import mandel
from mandel import main, parse_complex, parse_pair, write_image
from mandelbrot import ImageBounds, ViewRegion


class TestParsePair:
    """Test WIDTHxHEIGHT / RE,IM pair parsing."""

    @pytest.mark.parametrize("text", ["", "10,", ",10", "10,20xy"])
    def test_rejects_ints(self, text):
        assert parse_pair(text, ",", int) is None

    def test_ints(self):
        assert parse_pair("10,20", ",", int) == (10, 20)

    def test_floats(self):
        assert parse_pair("0.5x", "x", float) is None
        assert parse_pair("0.5x1.5", "x", float) == (0.5, 1.5)

    def test_splits_on_first_separator(self):
        assert parse_pair("1x2x3", "x", int) is None


class TestParseComplex:
    """Test corner point parsing."""

    def test_valid(self):
        assert parse_complex("1.25,-0.0625") == complex(1.25, -0.0625)

    def test_missing_real(self):
        assert parse_complex(",-0.0625") is None


class TestWriteImage:
    """Test grayscale image encoding through Pillow."""

    def test_round_trip(self, tmp_path):
        bounds = ImageBounds(5, 3)
        pixels = np.arange(15, dtype=np.uint8) * 17
        path = tmp_path / "nested" / "gray.png"
        write_image(path, pixels, bounds)

        with PIL.Image.open(path) as image:
            assert image.mode == "L"
            assert image.size == (5, 3)
            np.testing.assert_array_equal(np.asarray(image).ravel(), pixels)


class TestMain:
    """Test the command-line entry point end to end."""

    def test_renders_png(self, tmp_path, reference):
        out = tmp_path / "mandel.png"
        code = main(["--limit", "64", "--", str(out), "40x30", "-1.20,0.35", "-1,0.20", "slow"])
        assert code == 0

        region = ViewRegion(upper_left=complex(-1.20, 0.35), lower_right=complex(-1.0, 0.20))
        expected = reference(ImageBounds(40, 30), region, 64)
        with PIL.Image.open(out) as image:
            assert image.size == (40, 30)
            assert image.mode == "L"
            np.testing.assert_array_equal(np.asarray(image).ravel(), expected)

    def test_fast_is_default(self, tmp_path):
        out = tmp_path / "fast.png"
        assert main(["--workers", "3", "--", str(out), "16x12", "-2,1.25", "0.5,-1.25"]) == 0
        assert out.exists()

    def test_suffix_added_from_format(self, tmp_path):
        out = tmp_path / "frame"
        assert main(["--format", "bmp", "--", str(out), "8x8", "-2,1", "1,-1"]) == 0
        assert (tmp_path / "frame.bmp").exists()

    def test_format_mismatch(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main(["--format", "png", "--", str(tmp_path / "a.bmp"), "8x8", "-2,1", "1,-1"])
        assert excinfo.value.code == 2

    @pytest.mark.parametrize("pixels", ["40by30", "0x30", "40x", "x30"])
    def test_bad_dimensions(self, tmp_path, pixels):
        with pytest.raises(SystemExit) as excinfo:
            main(["--", str(tmp_path / "a.png"), pixels, "-2,1", "1,-1"])
        assert excinfo.value.code == 2

    def test_bad_corner(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main(["--", str(tmp_path / "a.png"), "8x8", "-2;1", "1,-1"])
        assert excinfo.value.code == 2

    def test_bad_workers(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["--workers", "0", "--", str(tmp_path / "a.png"), "8x8", "-2,1", "1,-1"])

    def test_mirrored_region_warns(self, tmp_path):
        with pytest.warns(UserWarning, match="mirrored"):
            code = main(["--", str(tmp_path / "a.png"), "8x8", "1,-1", "-2,1"])
        assert code == 0

    def test_write_failure(self, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        code = main(["--", str(blocker / "a.png"), "8x8", "-2,1", "1,-1"])
        assert code == 1
        assert "error writing image file" in capsys.readouterr().err

    def test_verbose_reports_progress(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setattr(mandel, "VERBOSE", False)
        assert main(["-v", "--", str(tmp_path / "a.png"), "8x8", "-2,1", "1,-1", "slow"]) == 0
        out = capsys.readouterr().out
        assert "Rendering 8x8" in out
        assert "Rendered in" in out
