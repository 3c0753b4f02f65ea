"""Lazily decoded image sources.

An :class:`ImageSource` is in exactly one of three states:

``Unopened``
    an open file handle plus the format declared by the extension or found by
    probing the file signature; no pixels in memory yet.
``Decoded``
    the pixels (an :class:`~thumbnailer.models.ImageBuffer`) are resident.
``Broken``
    decoding was attempted and failed; no partial buffer is kept.

``resolve`` performs the only transition out of ``Unopened``.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

from PIL import Image, UnidentifiedImageError

from thumbnailer.core.errors import (
    DecodeError,
    FileIOError,
    FileNotFound,
    FileNotSupported,
    SourceNotReloadable,
)
from thumbnailer.models import ImageBuffer
from thumbnailer.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Unopened:
    file: BinaryIO
    declared_format: str


@dataclass
class Decoded:
    buffer: ImageBuffer


@dataclass(frozen=True)
class Broken:
    reason: str


SourceState = Union[Unopened, Decoded, Broken]


def format_from_extension(path: Path) -> str | None:
    return Image.registered_extensions().get(path.suffix.lower())


def probe_format(file: BinaryIO) -> str | None:
    position = file.tell()
    try:
        with Image.open(file) as probe:
            return probe.format
    except UnidentifiedImageError:
        return None
    finally:
        file.seek(position)


def _close_file(file: BinaryIO) -> None:
    if not file.closed:
        file.close()


class ImageSource:
    def __init__(self, path: Path, state: SourceState, declared_format: str | None = None):
        self.path = Path(path)
        self.format = state.declared_format if isinstance(state, Unopened) else declared_format
        self._state: SourceState = state
        self._finalizer = None
        if isinstance(state, Unopened):
            self._finalizer = weakref.finalize(self, _close_file, state.file)

    @classmethod
    def load(cls, path: str | Path) -> "ImageSource":
        path = Path(path)
        if not path.is_file():
            raise FileNotFound(path)

        try:
            file = open(path, "rb")
        except FileNotFoundError as exc:
            raise FileNotFound(path) from exc
        except OSError as exc:
            raise FileIOError(path, exc) from exc

        try:
            declared_format = format_from_extension(path) or probe_format(file)
        except OSError as exc:
            file.close()
            raise FileIOError(path, exc) from exc

        if declared_format is None:
            file.close()
            raise FileNotSupported(path)

        return cls(path, Unopened(file=file, declared_format=declared_format))

    @classmethod
    def from_image(cls, path: str | Path, image: Image.Image) -> "ImageSource":
        path = Path(path)
        if not image.width or not image.height:
            raise ValueError(f"Cannot use an empty {image.width}x{image.height} image: {path}")
        declared_format = image.format or format_from_extension(path)
        return cls(path, Decoded(buffer=ImageBuffer.from_image(image)), declared_format)

    @staticmethod
    def can_load(path: str | Path) -> bool:
        path = Path(path)
        if not path.is_file():
            return False
        if format_from_extension(path):
            return True
        try:
            with open(path, "rb") as file:
                return probe_format(file) is not None
        except OSError:
            return False

    @property
    def state(self) -> SourceState:
        return self._state

    @property
    def is_decoded(self) -> bool:
        return isinstance(self._state, Decoded)

    def resolve(self) -> ImageBuffer:
        state = self._state
        if isinstance(state, Decoded):
            return state.buffer
        if isinstance(state, Broken):
            raise DecodeError(self.path, state.reason)

        logger.debug("Decoding %s as %s", self.path, state.declared_format)
        try:
            with Image.open(state.file) as opened:
                opened.load()
                exif = opened.getexif()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
            self._release()
            self._state = Broken(reason=f"{type(exc).__name__}: {exc}")
            raise DecodeError(self.path, self._state.reason) from exc

        self._release()
        buffer = ImageBuffer(image=opened, exif=exif)
        self._state = Decoded(buffer=buffer)
        return buffer

    def try_clone_and_reload(self) -> "ImageSource":
        if isinstance(self._state, Decoded):
            raise SourceNotReloadable(self.path)
        return ImageSource.load(self.path)

    def close(self) -> None:
        if not isinstance(self._state, Broken):
            self._release()
            self._state = Broken(reason="source closed")

    def _release(self) -> None:
        if self._finalizer is not None:
            self._finalizer()
            self._finalizer = None

    def __repr__(self) -> str:
        return f"ImageSource(path={str(self.path)!r}, state={type(self._state).__name__})"
