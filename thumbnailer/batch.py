from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError

from thumbnailer.core.collection import ThumbnailCollection, ThumbnailCollectionBuilder
from thumbnailer.core.errors import ThumbnailError
from thumbnailer.recipe import Recipe
from thumbnailer.utils.config import Config
from thumbnailer.utils.logger import get_logger

logger = get_logger(__name__)


def run(
    *,
    recipe_path: str | Path,
    images: Iterable[str | Path],
    config: Config | None = None,
    workers: int | None = None,
) -> int:
    config = config or Config.load()
    try:
        recipe = Recipe.load(recipe_path)
        if not recipe.targets:
            logger.error("Recipe %s defines no targets", recipe_path)
            return 1
        collection = _build_collection(config, images, workers)
        if not len(collection):
            logger.error("No loadable images given")
            return 1
        for operation in recipe.build_operations(config.thumbnail):
            collection.add_operation(operation)
        files = _store_all(collection, recipe)
    except (ThumbnailError, ValidationError, OSError) as exc:
        logger.error("Batch failed: %s", exc)
        print("\n❌ Thumbnail batch failed")
        print(f"Error: {exc}")
        return 1

    logger.info("Batch finished images=%d files=%d", len(collection), len(files))
    print("\n✅ Thumbnails written")
    for path in files:
        print(f"  {path}")
    return 0


def _build_collection(config: Config, images: Iterable[str | Path], workers: int | None) -> ThumbnailCollection:
    builder = ThumbnailCollectionBuilder(
        settings=config.thumbnail,
        max_workers=workers or config.batch.max_workers,
        skip_unloadable=config.batch.skip_unloadable,
    )
    for image in images:
        path = Path(image)
        if path.is_dir():
            builder.add_glob(path)
        else:
            builder.add_path(path)
    return builder.build()


def _store_all(collection: ThumbnailCollection, recipe: Recipe) -> List[Path]:
    files: List[Path] = []
    *extra_targets, last_target = recipe.targets
    # Every extra target gets an independently reloaded copy with the same queue.
    for target in extra_targets:
        clone = collection.try_clone_and_load()
        files.extend(clone.apply().store(target))
    files.extend(collection.apply().store(last_target))
    return files
