from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Literal, Tuple, Union

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveFloat, PositiveInt


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Height(FrozenModel):
    """Scale to the given height, keeping the aspect ratio."""

    kind: Literal["height"] = "height"
    height: PositiveInt


class Width(FrozenModel):
    """Scale to the given width, keeping the aspect ratio."""

    kind: Literal["width"] = "width"
    width: PositiveInt


class BoundingBox(FrozenModel):
    """Scale to fit inside ``width`` x ``height``, keeping the aspect ratio."""

    kind: Literal["bounding_box"] = "bounding_box"
    width: PositiveInt
    height: PositiveInt


class ExactBox(FrozenModel):
    """Scale to exactly ``width`` x ``height``; the aspect ratio may change."""

    kind: Literal["exact_box"] = "exact_box"
    width: PositiveInt
    height: PositiveInt


Resize = Annotated[Union[Height, Width, BoundingBox, ExactBox], Field(discriminator="kind")]


class CropBox(FrozenModel):
    kind: Literal["box"] = "box"
    x: NonNegativeInt
    y: NonNegativeInt
    width: PositiveInt
    height: PositiveInt


class CropRatio(FrozenModel):
    kind: Literal["ratio"] = "ratio"
    width: PositiveFloat
    height: PositiveFloat


Crop = Annotated[Union[CropBox, CropRatio], Field(discriminator="kind")]


class TopLeft(FrozenModel):
    kind: Literal["top_left"] = "top_left"
    x: NonNegativeInt = 0
    y: NonNegativeInt = 0


class TopRight(FrozenModel):
    kind: Literal["top_right"] = "top_right"
    x: NonNegativeInt = 0
    y: NonNegativeInt = 0


class BottomLeft(FrozenModel):
    kind: Literal["bottom_left"] = "bottom_left"
    x: NonNegativeInt = 0
    y: NonNegativeInt = 0


class BottomRight(FrozenModel):
    kind: Literal["bottom_right"] = "bottom_right"
    x: NonNegativeInt = 0
    y: NonNegativeInt = 0


BoxPosition = Annotated[Union[TopLeft, TopRight, BottomLeft, BottomRight], Field(discriminator="kind")]


class Keep(FrozenModel):
    kind: Literal["keep"] = "keep"


class Clear(FrozenModel):
    kind: Literal["clear"] = "clear"


class Whitelist(FrozenModel):
    kind: Literal["whitelist"] = "whitelist"
    tags: Tuple[int, ...] = ()


class Blacklist(FrozenModel):
    kind: Literal["blacklist"] = "blacklist"
    tags: Tuple[int, ...] = ()


ExifPolicy = Annotated[Union[Keep, Clear, Whitelist, Blacklist], Field(discriminator="kind")]


class Orientation(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class ResampleFilter(str, Enum):
    NEAREST = "nearest"
    TRIANGLE = "triangle"
    CATMULL_ROM = "catmull_rom"
    GAUSSIAN = "gaussian"
    LANCZOS3 = "lanczos3"

    @property
    def resampling(self) -> Image.Resampling:
        # Pillow has no gaussian resampler; hamming is the closest smooth kernel.
        return {
            ResampleFilter.NEAREST: Image.Resampling.NEAREST,
            ResampleFilter.TRIANGLE: Image.Resampling.BILINEAR,
            ResampleFilter.CATMULL_ROM: Image.Resampling.BICUBIC,
            ResampleFilter.GAUSSIAN: Image.Resampling.HAMMING,
            ResampleFilter.LANCZOS3: Image.Resampling.LANCZOS,
        }[self]


def copy_exif(exif: Image.Exif) -> Image.Exif:
    duplicate = Image.Exif()
    if len(exif):
        duplicate.load(exif.tobytes())
    return duplicate


@dataclass
class ImageBuffer:
    """Decoded pixels plus the EXIF tags that travel with them.

    Operations replace ``image`` in place; ``exif`` is kept beside the pixels
    so that geometry changes do not drop the metadata.
    """

    image: Image.Image
    exif: Image.Exif = field(default_factory=Image.Exif)

    @classmethod
    def from_image(cls, image: Image.Image) -> "ImageBuffer":
        return cls(image=image, exif=copy_exif(image.getexif()))

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def copy(self) -> "ImageBuffer":
        return ImageBuffer(image=self.image.copy(), exif=copy_exif(self.exif))


__all__ = [
    "Blacklist",
    "BottomLeft",
    "BottomRight",
    "BoundingBox",
    "BoxPosition",
    "Clear",
    "Crop",
    "CropBox",
    "CropRatio",
    "ExactBox",
    "ExifPolicy",
    "Height",
    "ImageBuffer",
    "Keep",
    "Orientation",
    "ResampleFilter",
    "Resize",
    "TopLeft",
    "TopRight",
    "Whitelist",
    "Width",
    "copy_exif",
]
