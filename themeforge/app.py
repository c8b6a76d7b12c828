"""Logging bootstrap shared by the command line entry points."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from themeforge.config.settings import AppSettings
from themeforge.runtime_paths import bundled_templates_root, is_frozen

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(settings: AppSettings, verbose: bool = False, log_dir: Path | None = None) -> logging.Logger:
    """Attach a rotating file handler (and a stderr handler when verbose) to the package logger."""
    logger = logging.getLogger("themeforge")
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    log_dir = log_dir or settings.data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / "themeforge.log",
        maxBytes=512_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    if verbose:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(console)

    logger.propagate = False
    logger.debug("startup frozen=%s templates=%s", is_frozen(), bundled_templates_root())
    return logger
