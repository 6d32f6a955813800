from __future__ import annotations

import logging
import sys

from .config import LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_configured = False


def configure_logging(level: str | int | None = None) -> None:
    global _configured
    root = logging.getLogger("mdexport")
    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        _configured = True
    root.setLevel(level if level is not None else LOG_LEVEL)


def get_logger(name: str) -> logging.Logger:
    if not _configured:
        configure_logging()
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"mdexport.{short}")
