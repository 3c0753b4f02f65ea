from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, Iterator, List

from thumbnailer.core.errors import ApplyError, CollectionApplyError, FileError
from thumbnailer.core.static import StaticThumbnail
from thumbnailer.core.thumbnail import Thumbnail
from thumbnailer.models import BoxPosition, Crop, ExifPolicy, Orientation, ResampleFilter, Resize
from thumbnailer.operations.base import Operation
from thumbnailer.store import StoreTarget
from thumbnailer.utils.config import ThumbnailSettings
from thumbnailer.utils.logger import get_logger

logger = get_logger(__name__)


class ThumbnailCollection:
    """Many thumbnails edited with one vocabulary.

    Every builder call queues the same operation on each member. ``apply``
    commits the members on a thread pool; each member still runs its own
    queue in order.
    """

    def __init__(self, thumbnails: Iterable[Thumbnail], max_workers: int | None = None):
        self.thumbnails: List[Thumbnail] = list(thumbnails)
        self.max_workers = max_workers

    def __len__(self) -> int:
        return len(self.thumbnails)

    def __iter__(self) -> Iterator[Thumbnail]:
        return iter(self.thumbnails)

    def add_operation(self, operation: Operation) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.add_operation(operation)
        return self

    def resize(self, size: Resize) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.resize(size)
        return self

    def resize_filter(self, size: Resize, filter: ResampleFilter) -> "ThumbnailCollection":  # noqa: A002
        for thumbnail in self.thumbnails:
            thumbnail.resize_filter(size, filter)
        return self

    def blur(self, sigma: float) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.blur(sigma)
        return self

    def brighten(self, value: int) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.brighten(value)
        return self

    def huerotate(self, degree: int) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.huerotate(degree)
        return self

    def contrast(self, value: float) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.contrast(value)
        return self

    def unsharpen(self, sigma: float, threshold: int) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.unsharpen(sigma, threshold)
        return self

    def crop(self, crop: Crop) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.crop(crop)
        return self

    def flip(self, orientation: Orientation) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.flip(orientation)
        return self

    def invert(self) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.invert()
        return self

    def exif(self, metadata: ExifPolicy) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.exif(metadata)
        return self

    def text(self, text: str, pos: BoxPosition) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.text(text, pos)
        return self

    def combine(self, image: StaticThumbnail, pos: BoxPosition) -> "ThumbnailCollection":
        for thumbnail in self.thumbnails:
            thumbnail.combine(image, pos)
        return self

    def apply(self) -> "ThumbnailCollection":
        errors: Dict[Path, ApplyError] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [(thumbnail, executor.submit(thumbnail.apply)) for thumbnail in self.thumbnails]
            for thumbnail, future in futures:
                try:
                    future.result()
                except ApplyError as exc:
                    errors[thumbnail.path] = exc

        if errors:
            logger.warning("%d of %d thumbnail(s) failed", len(errors), len(self.thumbnails))
            raise CollectionApplyError(errors)
        logger.info("Applied %d thumbnail(s)", len(self.thumbnails))
        return self

    def try_clone_and_load(self) -> "ThumbnailCollection":
        return ThumbnailCollection(
            [thumbnail.try_clone_and_load() for thumbnail in self.thumbnails],
            self.max_workers,
        )

    def store(self, target: StoreTarget) -> List[Path]:
        try:
            return self.store_keep(target)
        finally:
            self.close()

    def store_keep(self, target: StoreTarget) -> List[Path]:
        files: List[Path] = []
        for thumbnail in self.thumbnails:
            files.extend(thumbnail.store_keep(target))
        return files

    def apply_store_keep(self, target: StoreTarget) -> List[Path]:
        self.apply()
        return self.store_keep(target)

    def close(self) -> None:
        for thumbnail in self.thumbnails:
            thumbnail.close()


class ThumbnailCollectionBuilder:
    def __init__(
        self,
        settings: ThumbnailSettings | None = None,
        max_workers: int | None = None,
        skip_unloadable: bool = False,
    ):
        self.settings = settings or ThumbnailSettings()
        self.max_workers = max_workers
        self.skip_unloadable = skip_unloadable
        self._thumbnails: List[Thumbnail] = []

    def add_path(self, path: str | Path) -> "ThumbnailCollectionBuilder":
        try:
            self._thumbnails.append(Thumbnail.load(path, self.settings))
        except FileError as exc:
            if not self.skip_unloadable:
                raise
            logger.warning("Skipping %s: %s", path, exc)
        return self

    def add_paths(self, paths: Iterable[str | Path]) -> "ThumbnailCollectionBuilder":
        for path in paths:
            self.add_path(path)
        return self

    def add_glob(self, directory: str | Path, pattern: str = "*", recursive: bool = False) -> "ThumbnailCollectionBuilder":
        matches = Path(directory).rglob(pattern) if recursive else Path(directory).glob(pattern)
        for path in sorted(matches):
            if Thumbnail.can_load(path):
                self.add_path(path)
        return self

    def add_thumbnail(self, thumbnail: Thumbnail) -> "ThumbnailCollectionBuilder":
        self._thumbnails.append(thumbnail)
        return self

    def build(self) -> ThumbnailCollection:
        return ThumbnailCollection(self._thumbnails, self.max_workers)


__all__ = ["ThumbnailCollection", "ThumbnailCollectionBuilder"]
