from __future__ import annotations

from thumbnailer.models import Blacklist, Clear, ExifPolicy, ImageBuffer, Keep, Whitelist
from thumbnailer.operations.base import Operation, register_operation


@register_operation
class ExifOperation(Operation):
    name = "exif"

    def __init__(self, policy: ExifPolicy):
        self.policy = policy

    def _run(self, buffer: ImageBuffer) -> None:
        policy = self.policy
        if isinstance(policy, Keep):
            return
        if isinstance(policy, Clear):
            doomed = list(buffer.exif)
        elif isinstance(policy, Whitelist):
            doomed = [tag for tag in buffer.exif if tag not in policy.tags]
        elif isinstance(policy, Blacklist):
            doomed = [tag for tag in buffer.exif if tag in policy.tags]
        else:
            raise TypeError(f"Unknown exif policy: {policy!r}")
        for tag in doomed:
            del buffer.exif[tag]


__all__ = ["ExifOperation"]
