from __future__ import annotations

from typing import Any, Callable, Dict, Type, TypeVar

from PIL import Image

from thumbnailer.core.errors import OperationError, OperationFailed
from thumbnailer.models import ImageBuffer


class Operation:
    """One queued edit.

    Subclasses set ``name``, keep their parameters as read-only attributes and
    implement ``_run``; ``apply`` wraps any Pillow failure as ``OperationFailed``.
    """

    name: str = ""

    def apply(self, buffer: ImageBuffer) -> None:
        try:
            self._run(buffer)
        except OperationError:
            raise
        except (OSError, ValueError, TypeError, MemoryError, Image.DecompressionBombError) as exc:
            raise OperationFailed(self.name, exc) from exc

    def _run(self, buffer: ImageBuffer) -> None:
        raise NotImplementedError

    def _params(self) -> Dict[str, Any]:
        return {key.lstrip("_"): value for key, value in vars(self).items()}

    def __setattr__(self, key: str, value: Any) -> None:
        if key in self.__dict__:
            raise AttributeError(f"{type(self).__name__}.{key} is read-only")
        super().__setattr__(key, value)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self._params() == other._params()

    def __repr__(self) -> str:
        params = ", ".join(f"{key}={value!r}" for key, value in self._params().items())
        return f"{type(self).__name__}({params})"


OPERATION_REGISTRY: Dict[str, Type[Operation]] = {}

O = TypeVar("O", bound=Type[Operation])


def register_operation(operation_cls: O) -> O:
    OPERATION_REGISTRY[operation_cls.name] = operation_cls
    return operation_cls


def normalize_mode(image: Image.Image) -> Image.Image:
    if image.mode in ("L", "LA", "RGB", "RGBA"):
        return image
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")


def map_color_bands(image: Image.Image, transform: Callable[[Image.Image], Image.Image]) -> Image.Image:
    """Apply ``transform`` to the colour bands only, leaving alpha untouched."""
    image = normalize_mode(image)
    if image.mode in ("L", "RGB"):
        return transform(image)
    alpha = image.getchannel("A")
    color = transform(image.convert(image.mode[:-1]))
    color.putalpha(alpha)
    return color


def clamp_channel(value: float) -> int:
    return max(0, min(255, int(round(value))))


__all__ = [
    "OPERATION_REGISTRY",
    "Operation",
    "clamp_channel",
    "map_color_bands",
    "normalize_mode",
    "register_operation",
]
