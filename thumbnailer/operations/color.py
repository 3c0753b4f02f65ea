from __future__ import annotations

from PIL import Image, ImageFilter

from thumbnailer.models import ImageBuffer
from thumbnailer.operations.base import (
    Operation,
    clamp_channel,
    map_color_bands,
    normalize_mode,
    register_operation,
)


@register_operation
class BlurOperation(Operation):
    name = "blur"

    def __init__(self, sigma: float):
        self.sigma = float(sigma)

    def _run(self, buffer: ImageBuffer) -> None:
        buffer.image = normalize_mode(buffer.image).filter(ImageFilter.GaussianBlur(radius=self.sigma))


@register_operation
class BrightenOperation(Operation):
    name = "brighten"

    def __init__(self, value: int):
        self.value = int(value)

    def _run(self, buffer: ImageBuffer) -> None:
        value = self.value
        buffer.image = map_color_bands(buffer.image, lambda im: im.point(lambda p: clamp_channel(p + value)))


@register_operation
class HueRotateOperation(Operation):
    name = "huerotate"

    def __init__(self, degrees: int):
        self.degrees = int(degrees)

    def _run(self, buffer: ImageBuffer) -> None:
        shift = int(round((self.degrees % 360) * 256 / 360)) % 256
        if shift:
            buffer.image = map_color_bands(buffer.image, lambda im: self._rotate(im, shift))

    @staticmethod
    def _rotate(image: Image.Image, shift: int) -> Image.Image:
        if image.mode == "L":
            return image
        hue, saturation, value = image.convert("HSV").split()
        hue = hue.point(lambda h: (h + shift) % 256)
        return Image.merge("HSV", (hue, saturation, value)).convert("RGB")


@register_operation
class ContrastOperation(Operation):
    name = "contrast"

    def __init__(self, value: float):
        self.value = float(value)

    def _run(self, buffer: ImageBuffer) -> None:
        factor = ((100.0 + self.value) / 100.0) ** 2

        def adjust(p: int) -> int:
            return clamp_channel(((p / 255.0 - 0.5) * factor + 0.5) * 255.0)

        buffer.image = map_color_bands(buffer.image, lambda im: im.point(adjust))


@register_operation
class UnsharpenOperation(Operation):
    name = "unsharpen"

    def __init__(self, sigma: float, threshold: int):
        self.sigma = float(sigma)
        self.threshold = int(threshold)

    def _run(self, buffer: ImageBuffer) -> None:
        mask = ImageFilter.UnsharpMask(radius=self.sigma, percent=150, threshold=self.threshold)
        buffer.image = map_color_bands(buffer.image, lambda im: im.filter(mask))


@register_operation
class InvertOperation(Operation):
    name = "invert"

    def _run(self, buffer: ImageBuffer) -> None:
        buffer.image = map_color_bands(buffer.image, lambda im: im.point(lambda p: 255 - p))


__all__ = [
    "BlurOperation",
    "BrightenOperation",
    "ContrastOperation",
    "HueRotateOperation",
    "InvertOperation",
    "UnsharpenOperation",
]
