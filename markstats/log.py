from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

from rich.logging import RichHandler

PACKAGE_LOGGER = "markstats"
PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    no_color: bool = False


def setup_logging(cfg: LogConfig) -> logging.Logger:
    """Attach one console handler to the ``markstats`` logger.

    Handlers owned by the host application (root logger included) are left
    alone; calling this again replaces only the handler installed here.
    """
    level = getattr(logging, cfg.level.upper(), logging.INFO)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for h in list(logger.handlers):
        if getattr(h, "_markstats_console", False):
            logger.removeHandler(h)

    handler = _console_handler(no_color=cfg.no_color or os.getenv("NO_COLOR") is not None)
    handler.setLevel(level)
    handler._markstats_console = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


def _console_handler(*, no_color: bool) -> logging.Handler:
    if not no_color and sys.stderr.isatty():
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_time=False, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    return handler


def get_logger(name: str) -> logging.Logger:
    # Modules live under the package logger so setup_logging reaches them.
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
