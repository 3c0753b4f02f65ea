from __future__ import annotations

from pathlib import Path
from typing import Tuple

from PIL import Image, ImageDraw, ImageFont
from PIL.ImageColor import getrgb

from thumbnailer.core.errors import OutOfBounds
from thumbnailer.core.static import StaticThumbnail
from thumbnailer.models import BottomLeft, BottomRight, BoxPosition, ImageBuffer, TopLeft, TopRight
from thumbnailer.operations.base import Operation, normalize_mode, register_operation


def resolve_position(position: BoxPosition, canvas: Tuple[int, int], item: Tuple[int, int]) -> Tuple[int, int]:
    """Top-left pixel of an ``item``-sized box placed on ``canvas``.

    Offsets are measured inward from the corner the position names.
    """
    cw, ch = canvas
    iw, ih = item
    if isinstance(position, TopLeft):
        return position.x, position.y
    if isinstance(position, TopRight):
        return cw - iw - position.x, position.y
    if isinstance(position, BottomLeft):
        return position.x, ch - ih - position.y
    if isinstance(position, BottomRight):
        return cw - iw - position.x, ch - ih - position.y
    raise TypeError(f"Unknown box position: {position!r}")


def check_bounds(operation: str, origin: Tuple[int, int], item: Tuple[int, int], canvas: Tuple[int, int]) -> None:
    x, y = origin
    w, h = item
    if x < 0 or y < 0 or x + w > canvas[0] or y + h > canvas[1]:
        raise OutOfBounds(operation, (x, y, w, h), canvas)


def load_font(font_path: str | None, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    if font_path:
        font_file = Path(font_path)
        if font_file.exists():
            return ImageFont.truetype(str(font_file), size)
    return ImageFont.load_default(size=size)


def _rgba(color: str) -> Tuple[int, int, int, int]:
    rgb = getrgb(color)
    return rgb if len(rgb) == 4 else (*rgb, 255)


@register_operation
class TextOperation(Operation):
    name = "text"

    def __init__(
        self,
        text: str,
        position: BoxPosition,
        font_path: str | None = None,
        font_size: int = 24,
        color: str = "#FFFFFF",
    ):
        self.text = text
        self.position = position
        self.font_path = font_path
        self.font_size = int(font_size)
        self.color = color

    def _run(self, buffer: ImageBuffer) -> None:
        base = normalize_mode(buffer.image)
        layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        font = load_font(self.font_path, self.font_size)
        left, top, right, bottom = draw.textbbox((0, 0), self.text, font=font)
        size = (right - left, bottom - top)
        x, y = resolve_position(self.position, base.size, size)
        check_bounds(self.name, (x, y), size, base.size)

        draw.text((x - left, y - top), self.text, font=font, fill=_rgba(self.color))
        composed = Image.alpha_composite(base.convert("RGBA"), layer)
        buffer.image = composed if base.mode == "RGBA" else composed.convert(base.mode)


@register_operation
class CombineOperation(Operation):
    name = "combine"

    def __init__(self, image: StaticThumbnail, position: BoxPosition):
        self.image = image
        self.position = position

    def _run(self, buffer: ImageBuffer) -> None:
        overlay = self.image.image
        x, y = resolve_position(self.position, buffer.size, overlay.size)
        check_bounds(self.name, (x, y), overlay.size, buffer.size)

        target = normalize_mode(buffer.image)
        if target is buffer.image:
            target = target.copy()
        mask = overlay.getchannel("A") if "A" in overlay.getbands() else None
        target.paste(overlay, (x, y), mask)
        buffer.image = target


__all__ = ["CombineOperation", "TextOperation", "check_bounds", "load_font", "resolve_position"]
