"""Process-wide logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

from src.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FILE_NAME = "ride_companion.log"


def configure_logging(config: LoggingConfig) -> None:
    """Configure the root logger from LoggingConfig; an empty log_dir logs to console only."""
    level = getattr(logging, str(config.level).upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_dir:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


__all__ = ["configure_logging"]
