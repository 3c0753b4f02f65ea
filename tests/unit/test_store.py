from pathlib import Path

import pytest
from PIL import Image

from thumbnailer.core.errors import StoreError
from thumbnailer.models import ImageBuffer
from thumbnailer.store import FileTarget, extension_for

pytestmark = pytest.mark.unit


class TestFileTarget:
    def test_format_falls_back_to_source(self, output_dir):
        target = FileTarget(directory=output_dir)

        assert target.resolve_format(Path("photo.jpg"), "JPEG") == "JPEG"
        assert target.resolve_format(Path("photo.jpg")) == "JPEG"
        assert target.resolve_format(Path("photo.unknown")) == "PNG"

    def test_explicit_format_wins(self, output_dir):
        target = FileTarget(directory=output_dir, format="webp")

        assert target.resolve_format(Path("photo.jpg"), "JPEG") == "WEBP"

    def test_output_path(self, output_dir):
        target = FileTarget(directory=output_dir, suffix="_thumb")

        assert target.output_path(Path("/somewhere/photo.jpeg"), "JPEG") == output_dir / "photo_thumb.jpg"

    def test_extensions(self):
        assert extension_for("PNG") == ".png"
        assert extension_for("TIFF") == ".tiff"

    def test_rgba_to_jpeg_is_flattened(self, output_dir):
        buffer = ImageBuffer.from_image(Image.new("RGBA", (8, 8), (10, 20, 30, 128)))

        (path,) = FileTarget(directory=output_dir, format="JPEG").store(buffer, Path("alpha.png"))

        with Image.open(path) as stored:
            assert stored.mode == "RGB"

    def test_creates_directory(self, tmp_path):
        buffer = ImageBuffer.from_image(Image.new("RGB", (8, 8)))

        (path,) = FileTarget(directory=tmp_path / "nested" / "dir").store(buffer, Path("x.png"), "PNG")

        assert path.exists()

    def test_refuses_overwrite(self, output_dir):
        buffer = ImageBuffer.from_image(Image.new("RGB", (8, 8)))
        target = FileTarget(directory=output_dir, overwrite=False)
        target.store(buffer, Path("x.png"), "PNG")

        with pytest.raises(StoreError):
            target.store(buffer, Path("x.png"), "PNG")

    def test_unknown_format(self, output_dir):
        buffer = ImageBuffer.from_image(Image.new("RGB", (8, 8)))

        with pytest.raises(StoreError):
            FileTarget(directory=output_dir, format="nope").store(buffer, Path("x.png"))

    def test_quality_bounds(self, output_dir):
        with pytest.raises(ValueError):
            FileTarget(directory=output_dir, quality=0)
