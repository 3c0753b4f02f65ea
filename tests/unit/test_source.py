import pytest
from PIL import Image

from thumbnailer.core.errors import DecodeError, FileNotFound, FileNotSupported, SourceNotReloadable
from thumbnailer.core.source import Broken, Decoded, ImageSource, Unopened

pytestmark = pytest.mark.unit


class TestLoad:
    def test_load_does_not_decode(self, sample_png):
        source = ImageSource.load(sample_png)

        assert isinstance(source.state, Unopened)
        assert source.format == "PNG"
        assert not source.is_decoded
        source.close()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFound) as excinfo:
            ImageSource.load(tmp_path / "missing.png")

        assert excinfo.value.path == tmp_path / "missing.png"

    def test_directory_is_not_a_file(self, tmp_path):
        with pytest.raises(FileNotFound):
            ImageSource.load(tmp_path)

    def test_unknown_extension_and_content(self, not_an_image):
        with pytest.raises(FileNotSupported):
            ImageSource.load(not_an_image)

    def test_format_probed_without_extension(self, make_image):
        path = make_image("no_extension", image_format="PNG")

        source = ImageSource.load(path)

        assert source.format == "PNG"
        assert source.resolve().size == (400, 300)

    def test_extension_decides_declared_format(self, make_image):
        path = make_image("photo.jpeg")

        assert ImageSource.load(path).format == "JPEG"

    def test_can_load(self, sample_png, not_an_image, tmp_path):
        assert ImageSource.can_load(sample_png)
        assert not ImageSource.can_load(not_an_image)
        assert not ImageSource.can_load(tmp_path / "missing.png")


class TestResolve:
    def test_resolve_decodes_and_releases_file(self, sample_png):
        source = ImageSource.load(sample_png)
        handle = source.state.file

        buffer = source.resolve()

        assert isinstance(source.state, Decoded)
        assert buffer.size == (400, 300)
        assert handle.closed

    def test_resolve_is_idempotent(self, sample_png):
        source = ImageSource.load(sample_png)

        assert source.resolve() is source.resolve()

    def test_decode_failure_breaks_source(self, broken_png):
        source = ImageSource.load(broken_png)
        handle = source.state.file

        with pytest.raises(DecodeError):
            source.resolve()

        assert isinstance(source.state, Broken)
        assert handle.closed
        with pytest.raises(DecodeError):
            source.resolve()

    def test_exif_travels_with_pixels(self, sample_jpeg_with_exif):
        buffer = ImageSource.load(sample_jpeg_with_exif).resolve()

        assert buffer.exif[0x010F] == "Acme"

    def test_from_image_starts_decoded(self):
        image = Image.new("RGB", (32, 16), "white")

        source = ImageSource.from_image("memory.png", image)

        assert source.is_decoded
        assert source.format == "PNG"
        assert source.resolve().size == (32, 16)


class TestCloneAndClose:
    def test_reload_opens_independent_handle(self, sample_png):
        source = ImageSource.load(sample_png)

        clone = source.try_clone_and_reload()

        assert isinstance(clone.state, Unopened)
        assert clone.state.file is not source.state.file
        clone.resolve()
        assert isinstance(source.state, Unopened)

    def test_decoded_source_is_not_reloadable(self, sample_png):
        source = ImageSource.load(sample_png)
        source.resolve()

        with pytest.raises(SourceNotReloadable):
            source.try_clone_and_reload()

    def test_reload_after_delete(self, sample_png):
        source = ImageSource.load(sample_png)
        sample_png.unlink()

        with pytest.raises(FileNotFound):
            source.try_clone_and_reload()

    def test_close_releases_handle(self, sample_png):
        source = ImageSource.load(sample_png)
        handle = source.state.file

        source.close()

        assert handle.closed
        assert isinstance(source.state, Broken)
        with pytest.raises(DecodeError):
            source.resolve()
