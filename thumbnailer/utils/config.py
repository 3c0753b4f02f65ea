from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, PositiveInt

from thumbnailer.models import ResampleFilter

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default.yaml"


class ThumbnailSettings(BaseModel):
    default_filter: ResampleFilter = ResampleFilter.LANCZOS3
    font_path: str | None = None
    font_size: PositiveInt = 24
    text_color: str = "#FFFFFF"


class BatchConfig(BaseModel):
    max_workers: PositiveInt | None = None
    skip_unloadable: bool = True


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["text", "json"] = "text"


class Config(BaseModel):
    thumbnail: ThumbnailSettings = Field(default_factory=ThumbnailSettings)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "Config":
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH
        else:
            config_path = Path(config_path)

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return cls(**(data or {}))
