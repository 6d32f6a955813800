from __future__ import annotations

import os
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


REPO_ROOT = _repo_root()

OUTPUT_FILENAME = os.getenv("MDEXPORT_OUTPUT_FILENAME", "markdown_export.pdf")
DOCUMENT_TITLE = os.getenv("MDEXPORT_TITLE", "Markdown Export")

FONT_DIR = Path(os.getenv("MDEXPORT_FONT_DIR", str(REPO_ROOT / "backend" / "assets" / "fonts")))

LOG_LEVEL = os.getenv("MDEXPORT_LOG_LEVEL", "INFO").upper()
