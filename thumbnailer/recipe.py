from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Dict, Iterable, List, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, NonNegativeInt, PositiveInt, TypeAdapter

from thumbnailer.core.thumbnail import Thumbnail
from thumbnailer.models import BoxPosition, Crop, ExifPolicy, Orientation, ResampleFilter, Resize
from thumbnailer.operations.base import OPERATION_REGISTRY, Operation
from thumbnailer.store import FileTarget
from thumbnailer.utils.config import ThumbnailSettings


class OperationEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: str
    enabled: bool = True

    def params(self, settings: ThumbnailSettings) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in type(self).model_fields if name not in {"type", "enabled"}}

    def build(self, settings: ThumbnailSettings) -> Operation:
        return OPERATION_REGISTRY[self.type](**self.params(settings))


class ResizeEntry(OperationEntry):
    type: Literal["resize"] = "resize"
    mode: Resize
    filter: ResampleFilter | None = None

    def params(self, settings: ThumbnailSettings) -> Dict[str, Any]:
        return {"mode": self.mode, "filter": self.filter or settings.default_filter}


class BlurEntry(OperationEntry):
    type: Literal["blur"] = "blur"
    sigma: NonNegativeFloat


class BrightenEntry(OperationEntry):
    type: Literal["brighten"] = "brighten"
    value: int


class HueRotateEntry(OperationEntry):
    type: Literal["huerotate"] = "huerotate"
    degrees: int


class ContrastEntry(OperationEntry):
    type: Literal["contrast"] = "contrast"
    value: float


class UnsharpenEntry(OperationEntry):
    type: Literal["unsharpen"] = "unsharpen"
    sigma: NonNegativeFloat
    threshold: NonNegativeInt


class CropEntry(OperationEntry):
    type: Literal["crop"] = "crop"
    spec: Crop


class FlipEntry(OperationEntry):
    type: Literal["flip"] = "flip"
    orientation: Orientation


class InvertEntry(OperationEntry):
    type: Literal["invert"] = "invert"


class ExifEntry(OperationEntry):
    type: Literal["exif"] = "exif"
    policy: ExifPolicy


class TextEntry(OperationEntry):
    type: Literal["text"] = "text"
    text: str = Field(min_length=1)
    position: BoxPosition
    font_path: str | None = None
    font_size: PositiveInt | None = None
    color: str | None = None

    def params(self, settings: ThumbnailSettings) -> Dict[str, Any]:
        return {
            "text": self.text,
            "position": self.position,
            "font_path": self.font_path or settings.font_path,
            "font_size": self.font_size or settings.font_size,
            "color": self.color or settings.text_color,
        }


class CombineEntry(OperationEntry):
    """Overlay another image file; it is loaded, optionally resized and
    snapshotted while the recipe is built."""

    type: Literal["combine"] = "combine"
    image_path: str
    position: BoxPosition
    resize: Resize | None = None

    def params(self, settings: ThumbnailSettings) -> Dict[str, Any]:
        with Thumbnail.load(self.image_path, settings) as overlay:
            if self.resize is not None:
                overlay.resize(self.resize).apply()
            snapshot = overlay.clone_static_copy()
        return {"image": snapshot, "position": self.position}


OperationConfig = Annotated[
    Union[
        ResizeEntry,
        BlurEntry,
        BrightenEntry,
        HueRotateEntry,
        ContrastEntry,
        UnsharpenEntry,
        CropEntry,
        FlipEntry,
        InvertEntry,
        ExifEntry,
        TextEntry,
        CombineEntry,
    ],
    Field(discriminator="type"),
]

OPERATION_CONFIG = TypeAdapter(OperationConfig)


class Recipe(BaseModel):
    operations: List[OperationConfig] = Field(default_factory=list)
    targets: List[FileTarget] = Field(default_factory=list)

    @classmethod
    def load(cls, recipe_path: str | Path) -> "Recipe":
        with open(recipe_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls(**(data or {}))

    def build_operations(self, settings: ThumbnailSettings | None = None) -> List[Operation]:
        return build_operations(self.operations, settings)


def build_operations(
    entries: Iterable[OperationEntry | Dict[str, Any]] | None,
    settings: ThumbnailSettings | None = None,
) -> List[Operation]:
    settings = settings or ThumbnailSettings()
    operations: List[Operation] = []
    for raw in entries or []:
        entry = raw if isinstance(raw, OperationEntry) else OPERATION_CONFIG.validate_python(raw)
        if not entry.enabled:
            continue
        operations.append(entry.build(settings))
    return operations


__all__ = ["OperationConfig", "OperationEntry", "Recipe", "build_operations"]
