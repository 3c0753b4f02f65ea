import logging

from thumbnailer.utils.config import LoggingConfig

LOG_FORMATS = {
    "text": "%(message)s",
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
}


def setup_logging(config: LoggingConfig | None = None) -> None:
    config = config or LoggingConfig()
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMATS[config.format], force=True)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
