from pathlib import Path

import pytest
from PIL import Image, ImageDraw


@pytest.fixture
def make_tiff(tmp_path):
    """Write a TIFF with a black rectangle on white; return its path."""

    def _make(name="text.tif", mode="1", size=(120, 80), **save_kwargs):
        if mode in ("1", "L", "RGB"):
            img = Image.new(mode, size, "white")
            ImageDraw.Draw(img).rectangle([10, 10, 40, 30], fill="black")
        else:
            img = Image.new(mode, size)
        path = tmp_path / name
        img.save(path, format="TIFF", **save_kwargs)
        return path

    return _make


@pytest.fixture
def make_jpeg(tmp_path):
    def _make(name="background.jpg", mode="RGB", size=(240, 160), color="lightblue"):
        path = tmp_path / name
        Image.new(mode, size, color).save(path, format="JPEG", quality=80)
        return path

    return _make


@pytest.fixture
def inputs(make_tiff, make_jpeg):
    """A valid (background, foreground) pair."""
    return make_jpeg(), make_tiff()


@pytest.fixture
def output_path(tmp_path) -> Path:
    return tmp_path / "output.pdf"
