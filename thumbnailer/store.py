from __future__ import annotations

from pathlib import Path
from typing import List, Protocol

from PIL import Image
from pydantic import BaseModel, Field

from thumbnailer.core.errors import StoreError
from thumbnailer.models import ImageBuffer
from thumbnailer.utils.logger import get_logger

logger = get_logger(__name__)

PREFERRED_EXTENSIONS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "WEBP": ".webp",
    "GIF": ".gif",
    "BMP": ".bmp",
    "TIFF": ".tiff",
}
EXIF_FORMATS = {"JPEG", "PNG", "WEBP", "TIFF"}
QUALITY_FORMATS = {"JPEG", "WEBP"}


class StoreTarget(Protocol):
    def store(self, buffer: ImageBuffer, source_path: Path, source_format: str | None = None) -> List[Path]: ...


def extension_for(image_format: str) -> str:
    if image_format in PREFERRED_EXTENSIONS:
        return PREFERRED_EXTENSIONS[image_format]
    for extension, registered in Image.registered_extensions().items():
        if registered == image_format:
            return extension
    return f".{image_format.lower()}"


class FileTarget(BaseModel):
    """Writes one file per thumbnail into ``directory``."""

    directory: Path
    format: str | None = None
    suffix: str = ""
    quality: int = Field(default=90, ge=1, le=100)
    overwrite: bool = True

    def resolve_format(self, source_path: Path, source_format: str | None = None) -> str:
        if self.format:
            return self.format.upper()
        if source_format:
            return source_format.upper()
        return Image.registered_extensions().get(source_path.suffix.lower(), "PNG")

    def output_path(self, source_path: Path, image_format: str) -> Path:
        return self.directory / f"{source_path.stem}{self.suffix}{extension_for(image_format)}"

    def store(self, buffer: ImageBuffer, source_path: Path, source_format: str | None = None) -> List[Path]:
        image_format = self.resolve_format(Path(source_path), source_format)
        output_path = self.output_path(Path(source_path), image_format)
        if output_path.exists() and not self.overwrite:
            raise StoreError(output_path, "file exists and overwrite is disabled")

        image = buffer.image
        if image_format == "JPEG" and image.mode not in ("RGB", "L", "CMYK"):
            image = image.convert("RGB")
        params = {}
        if image_format in QUALITY_FORMATS:
            params["quality"] = self.quality
        if image_format in EXIF_FORMATS and len(buffer.exif):
            params["exif"] = buffer.exif

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            image.save(output_path, format=image_format, **params)
        except (OSError, ValueError, KeyError) as exc:
            raise StoreError(output_path, f"{type(exc).__name__}: {exc}") from exc

        logger.debug("Stored %s as %s", output_path, image_format)
        return [output_path]


__all__ = ["FileTarget", "StoreTarget", "extension_for"]
