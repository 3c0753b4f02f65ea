from __future__ import annotations

from pathlib import Path
from typing import Tuple

from PIL import Image

from thumbnailer.models import ImageBuffer


class StaticThumbnail:
    """A detached, read-only copy of a thumbnail's pixels.

    ``path`` names where the pixels came from and is kept for diagnostics only;
    the snapshot never reads from it again.
    """

    __slots__ = ("_path", "_buffer")

    def __init__(self, path: str | Path, buffer: ImageBuffer):
        self._path = Path(path)
        self._buffer = buffer.copy()

    @classmethod
    def from_image(cls, path: str | Path, image: Image.Image) -> "StaticThumbnail":
        return cls(path, ImageBuffer.from_image(image))

    @property
    def path(self) -> Path:
        return self._path

    @property
    def size(self) -> Tuple[int, int]:
        return self._buffer.size

    @property
    def width(self) -> int:
        return self._buffer.width

    @property
    def height(self) -> int:
        return self._buffer.height

    @property
    def mode(self) -> str:
        return self._buffer.image.mode

    @property
    def image(self) -> Image.Image:
        # Shared read-only view used by compositing; never mutate it.
        return self._buffer.image

    def to_image(self) -> Image.Image:
        return self._buffer.image.copy()

    def __repr__(self) -> str:
        return f"StaticThumbnail(path={str(self._path)!r}, size={self.size})"
