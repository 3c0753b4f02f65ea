from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from thumbnailer.operations.base import Operation


class ThumbnailError(RuntimeError): ...


class FileError(ThumbnailError):
    def __init__(self, path: Path | str, message: str):
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


class FileNotFound(FileError):
    def __init__(self, path: Path | str):
        super().__init__(path, "File not found")


class FileNotSupported(FileError):
    def __init__(self, path: Path | str):
        super().__init__(path, "Image format not supported")


class FileIOError(FileError):
    def __init__(self, path: Path | str, error: OSError):
        super().__init__(path, f"I/O error ({error})")
        self.error = error


class DecodeError(FileError):
    def __init__(self, path: Path | str, reason: str):
        super().__init__(path, f"Could not decode image ({reason})")
        self.reason = reason


class SourceNotReloadable(FileError):
    def __init__(self, path: Path | str):
        super().__init__(path, "Decoded image cannot be reloaded from disk")


class OperationError(ThumbnailError): ...


class OutOfBounds(OperationError):
    def __init__(
        self,
        operation: str,
        box: tuple[int, int, int, int],
        bounds: tuple[int, int],
    ):
        x, y, w, h = box
        super().__init__(
            f"{operation}: box {w}x{h}+{x}+{y} does not fit into {bounds[0]}x{bounds[1]}"
        )
        self.operation = operation
        self.box = box
        self.bounds = bounds


class OperationFailed(OperationError):
    def __init__(self, operation: str, error: Exception):
        super().__init__(f"{operation}: {type(error).__name__}: {error}")
        self.operation = operation
        self.error = error


class StoreError(ThumbnailError):
    def __init__(self, path: Path | str, reason: str):
        super().__init__(f"Could not store {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class ApplyError(ThumbnailError):
    """Raised by ``apply``/``store`` with the underlying failure in ``error``.

    ``operation`` is the operation that failed (``None`` for decode and store
    failures) and ``applied`` counts the operations that took effect before it.
    """

    def __init__(
        self,
        path: Path | str,
        error: OperationError | FileError | StoreError,
        operation: "Operation | None" = None,
        applied: int = 0,
    ):
        where = f" at {operation.name}" if operation is not None else ""
        super().__init__(f"{path}{where}: {error}")
        self.path = Path(path)
        self.error = error
        self.operation = operation
        self.applied = applied


class CollectionApplyError(ThumbnailError):
    def __init__(self, errors: Mapping[Path, ApplyError]):
        names = ", ".join(str(path) for path in errors) or "no thumbnails"
        super().__init__(f"{len(errors)} thumbnail(s) failed: {names}")
        self.errors = dict(errors)


__all__ = [
    "ApplyError",
    "CollectionApplyError",
    "DecodeError",
    "FileError",
    "FileIOError",
    "FileNotFound",
    "FileNotSupported",
    "OperationError",
    "OperationFailed",
    "OutOfBounds",
    "SourceNotReloadable",
    "StoreError",
    "ThumbnailError",
]
