"""
Test configuration - image fixtures are synthesized with Pillow into tmp_path.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator, Tuple

import pytest
from PIL import Image, ImageDraw

RED = (200, 40, 40)
BLUE = (40, 40, 200)
GREEN = (40, 200, 40)

MAKE_TAG = 0x010F
MODEL_TAG = 0x0110
SOFTWARE_TAG = 0x0131


def draw_sample(size: Tuple[int, int] = (400, 300)) -> Image.Image:
    """Left half red, right half blue, a 50x50 green block in the top-left corner."""
    width, height = size
    image = Image.new("RGB", size, RED)
    draw = ImageDraw.Draw(image)
    draw.rectangle((width // 2, 0, width - 1, height - 1), fill=BLUE)
    draw.rectangle((0, 0, min(49, width - 1), min(49, height - 1)), fill=GREEN)
    return image


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """setup_logging() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def make_image(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str = "sample.png", size: Tuple[int, int] = (400, 300), image_format: str | None = None) -> Path:
        path = tmp_path / "images" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        draw_sample(size).save(path, format=image_format)
        return path

    return _make


@pytest.fixture
def sample_png(make_image) -> Path:
    return make_image()


@pytest.fixture
def sample_jpeg_with_exif(tmp_path: Path) -> Path:
    path = tmp_path / "images" / "camera.jpg"
    path.parent.mkdir(parents=True, exist_ok=True)
    exif = Image.Exif()
    exif[MAKE_TAG] = "Acme"
    exif[MODEL_TAG] = "Pinhole 1"
    exif[SOFTWARE_TAG] = "darkroom"
    draw_sample().save(path, format="JPEG", quality=95, exif=exif)
    return path


@pytest.fixture
def not_an_image(tmp_path: Path) -> Path:
    path = tmp_path / "images" / "notes.xyz"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("just some text, no pixels here", encoding="utf-8")
    return path


@pytest.fixture
def broken_png(tmp_path: Path) -> Path:
    path = tmp_path / "images" / "broken.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"definitely not a png")
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path
