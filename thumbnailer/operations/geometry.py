from __future__ import annotations

from typing import Tuple

from PIL import Image

from thumbnailer.core.errors import OutOfBounds
from thumbnailer.models import (
    BoundingBox,
    Crop,
    CropBox,
    CropRatio,
    ExactBox,
    Height,
    ImageBuffer,
    Orientation,
    ResampleFilter,
    Resize,
    Width,
)
from thumbnailer.operations.base import Operation, register_operation


def resize_dimensions(mode: Resize, width: int, height: int) -> Tuple[int, int]:
    if not width or not height:
        raise ValueError(f"cannot scale a {width}x{height} image")
    if isinstance(mode, ExactBox):
        return mode.width, mode.height
    if isinstance(mode, Height):
        scale = mode.height / height
    elif isinstance(mode, Width):
        scale = mode.width / width
    elif isinstance(mode, BoundingBox):
        scale = min(mode.width / width, mode.height / height)
    else:
        raise TypeError(f"Unknown resize mode: {mode!r}")
    return max(1, int(round(width * scale))), max(1, int(round(height * scale)))


def ratio_box(ratio: CropRatio, width: int, height: int) -> Tuple[int, int, int, int]:
    """Largest centred ``(x, y, w, h)`` box with the aspect ratio of ``ratio``."""
    if not width or not height:
        raise ValueError(f"cannot crop a {width}x{height} image to a ratio")
    target = ratio.width / ratio.height
    if width / height > target:
        w, h = max(1, min(width, int(round(height * target)))), height
    else:
        w, h = width, max(1, min(height, int(round(width / target))))
    return (width - w) // 2, (height - h) // 2, w, h


@register_operation
class ResizeOperation(Operation):
    name = "resize"

    def __init__(self, mode: Resize, filter: ResampleFilter = ResampleFilter.LANCZOS3):  # noqa: A002
        self.mode = mode
        self.filter = ResampleFilter(filter)

    def _run(self, buffer: ImageBuffer) -> None:
        size = resize_dimensions(self.mode, buffer.width, buffer.height)
        if size != buffer.size:
            buffer.image = buffer.image.resize(size, self.filter.resampling)


@register_operation
class CropOperation(Operation):
    name = "crop"

    def __init__(self, spec: Crop):
        self.spec = spec

    def _run(self, buffer: ImageBuffer) -> None:
        if isinstance(self.spec, CropBox):
            box = (self.spec.x, self.spec.y, self.spec.width, self.spec.height)
            x, y, w, h = box
            if x + w > buffer.width or y + h > buffer.height:
                raise OutOfBounds(self.name, box, buffer.size)
        else:
            x, y, w, h = ratio_box(self.spec, buffer.width, buffer.height)
        buffer.image = buffer.image.crop((x, y, x + w, y + h))


@register_operation
class FlipOperation(Operation):
    name = "flip"

    def __init__(self, orientation: Orientation):
        self.orientation = Orientation(orientation)

    def _run(self, buffer: ImageBuffer) -> None:
        if self.orientation is Orientation.VERTICAL:
            buffer.image = buffer.image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
        else:
            buffer.image = buffer.image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)


__all__ = ["CropOperation", "FlipOperation", "ResizeOperation", "ratio_box", "resize_dimensions"]
