from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Tuple

from PIL import Image
from pydantic import TypeAdapter

from thumbnailer.core.errors import ApplyError, FileError, OperationError, StoreError
from thumbnailer.core.source import ImageSource
from thumbnailer.core.static import StaticThumbnail
from thumbnailer.models import BoxPosition, Crop, ExifPolicy, ImageBuffer, Orientation, ResampleFilter, Resize
from thumbnailer.operations.base import Operation
from thumbnailer.operations.color import (
    BlurOperation,
    BrightenOperation,
    ContrastOperation,
    HueRotateOperation,
    InvertOperation,
    UnsharpenOperation,
)
from thumbnailer.operations.geometry import CropOperation, FlipOperation, ResizeOperation
from thumbnailer.operations.metadata import ExifOperation
from thumbnailer.operations.overlay import CombineOperation, TextOperation
from thumbnailer.store import StoreTarget
from thumbnailer.utils.config import ThumbnailSettings
from thumbnailer.utils.logger import get_logger

logger = get_logger(__name__)

RESIZE = TypeAdapter(Resize)
CROP = TypeAdapter(Crop)
BOX_POSITION = TypeAdapter(BoxPosition)
EXIF_POLICY = TypeAdapter(ExifPolicy)


class Thumbnail:
    """An image plus the edits queued against it.

    Builder methods only queue operations and return ``self``; nothing is
    decoded until :meth:`apply`, :meth:`clone_static_copy`,
    :meth:`dimensions` or a store call needs the pixels.

    ``width`` and ``height`` are advisory: they are ``0`` until the image has
    been decoded and are refreshed every time the pixels are touched.
    """

    def __init__(
        self,
        source: ImageSource,
        settings: ThumbnailSettings | None = None,
        operations: Iterable[Operation] | None = None,
    ):
        self._source = source
        self.settings = settings or ThumbnailSettings()
        self._ops: List[Operation] = list(operations or [])
        self.width = 0
        self.height = 0

    @classmethod
    def load(cls, path: str | Path, settings: ThumbnailSettings | None = None) -> "Thumbnail":
        return cls(ImageSource.load(path), settings)

    @classmethod
    def from_image(
        cls,
        path_name: str | Path,
        image: Image.Image,
        settings: ThumbnailSettings | None = None,
    ) -> "Thumbnail":
        """Wrap an already decoded image; ``path_name`` is used for naming only."""
        thumbnail = cls(ImageSource.from_image(path_name, image), settings)
        thumbnail._refresh_size(thumbnail._source.resolve())
        return thumbnail

    from_buffer = from_image

    @staticmethod
    def can_load(path: str | Path) -> bool:
        return ImageSource.can_load(path)

    @property
    def path(self) -> Path:
        return self._source.path

    @property
    def format(self) -> str | None:
        return self._source.format

    @property
    def is_loaded(self) -> bool:
        return self._source.is_decoded

    @property
    def pending_operations(self) -> Tuple[Operation, ...]:
        return tuple(self._ops)

    def add_operation(self, operation: Operation) -> "Thumbnail":
        if not isinstance(operation, Operation):
            raise TypeError(f"Expected an Operation, got {type(operation).__name__}")
        self._ops.append(operation)
        return self

    def resize(self, size: Resize) -> "Thumbnail":
        return self.add_operation(ResizeOperation(RESIZE.validate_python(size), self.settings.default_filter))

    def resize_filter(self, size: Resize, filter: ResampleFilter) -> "Thumbnail":  # noqa: A002
        return self.add_operation(ResizeOperation(RESIZE.validate_python(size), ResampleFilter(filter)))

    def blur(self, sigma: float) -> "Thumbnail":
        if sigma < 0:
            raise ValueError(f"blur sigma must not be negative, got {sigma}")
        return self.add_operation(BlurOperation(sigma))

    def brighten(self, value: int) -> "Thumbnail":
        return self.add_operation(BrightenOperation(value))

    def huerotate(self, degree: int) -> "Thumbnail":
        return self.add_operation(HueRotateOperation(degree))

    def contrast(self, value: float) -> "Thumbnail":
        return self.add_operation(ContrastOperation(value))

    def unsharpen(self, sigma: float, threshold: int) -> "Thumbnail":
        if sigma < 0 or threshold < 0:
            raise ValueError(f"unsharpen needs non-negative sigma and threshold, got {sigma}, {threshold}")
        return self.add_operation(UnsharpenOperation(sigma, threshold))

    def crop(self, crop: Crop) -> "Thumbnail":
        return self.add_operation(CropOperation(CROP.validate_python(crop)))

    def flip(self, orientation: Orientation) -> "Thumbnail":
        return self.add_operation(FlipOperation(Orientation(orientation)))

    def invert(self) -> "Thumbnail":
        return self.add_operation(InvertOperation())

    def exif(self, metadata: ExifPolicy) -> "Thumbnail":
        return self.add_operation(ExifOperation(EXIF_POLICY.validate_python(metadata)))

    def text(self, text: str, pos: BoxPosition) -> "Thumbnail":
        if not text:
            raise ValueError("text must not be empty")
        settings = self.settings
        return self.add_operation(
            TextOperation(
                text,
                BOX_POSITION.validate_python(pos),
                font_path=settings.font_path,
                font_size=settings.font_size,
                color=settings.text_color,
            )
        )

    def combine(self, image: StaticThumbnail, pos: BoxPosition) -> "Thumbnail":
        if not isinstance(image, StaticThumbnail):
            raise TypeError(f"combine expects a StaticThumbnail, got {type(image).__name__}")
        return self.add_operation(CombineOperation(image, BOX_POSITION.validate_python(pos)))

    def apply(self) -> "Thumbnail":
        """Decode if needed and run the queued operations in order.

        On failure the operations that already ran stay applied and are removed
        from the queue; the failing operation and everything after it stay
        queued, so calling ``apply`` again resumes at the failed operation.
        """
        buffer = self._resolve()
        if not self._ops:
            return self

        logger.debug("Applying %d operation(s) to %s", len(self._ops), self.path)
        for index, operation in enumerate(self._ops):
            try:
                operation.apply(buffer)
            except OperationError as exc:
                self._drop_applied(index, buffer)
                logger.warning("Operation %s failed on %s: %s", operation.name, self.path, exc)
                raise ApplyError(self.path, exc, operation, index) from exc
            except Exception:
                self._drop_applied(index, buffer)
                raise

        self._ops.clear()
        self._refresh_size(buffer)
        return self

    def dimensions(self) -> Tuple[int, int]:
        buffer = self._source.resolve()
        self._refresh_size(buffer)
        return buffer.size

    def clone_static_copy(self) -> StaticThumbnail:
        buffer = self._source.resolve()
        self._refresh_size(buffer)
        return StaticThumbnail(self.path, buffer)

    def try_clone_and_load(self) -> "Thumbnail":
        return Thumbnail(self._source.try_clone_and_reload(), self.settings, self._ops)

    def store(self, target: StoreTarget) -> List[Path]:
        try:
            return self.store_keep(target)
        finally:
            self.close()

    def store_keep(self, target: StoreTarget) -> List[Path]:
        buffer = self._resolve()
        try:
            return target.store(buffer, self.path, self.format)
        except StoreError as exc:
            raise ApplyError(self.path, exc) from exc

    def apply_store(self, target: StoreTarget) -> List[Path]:
        try:
            self.apply()
            return self.store_keep(target)
        finally:
            self.close()

    def apply_store_keep(self, target: StoreTarget) -> List[Path]:
        self.apply()
        return self.store_keep(target)

    def close(self) -> None:
        self._source.close()

    def _resolve(self) -> ImageBuffer:
        try:
            buffer = self._source.resolve()
        except FileError as exc:
            raise ApplyError(self.path, exc) from exc
        self._refresh_size(buffer)
        return buffer

    def _drop_applied(self, count: int, buffer: ImageBuffer) -> None:
        del self._ops[:count]
        self._refresh_size(buffer)

    def _refresh_size(self, buffer: ImageBuffer) -> None:
        self.width, self.height = buffer.size

    def __enter__(self) -> "Thumbnail":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def __repr__(self) -> str:
        return f"Thumbnail(path={str(self.path)!r}, pending={len(self._ops)}, loaded={self.is_loaded})"


__all__ = ["Thumbnail"]
