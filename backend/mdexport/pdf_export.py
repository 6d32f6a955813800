from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .commands import Heading
from .config import DOCUMENT_TITLE, FONT_DIR
from .errors import IOFailureError
from .events import iter_events
from .layout import MARGIN_MM, PAGE_HEIGHT_MM, PAGE_WIDTH_MM, LayoutEngine
from .logging_utils import get_logger
from .pdf_surface import PdfSurface
from .reducer import reduce_events

log = get_logger(__name__)

FILE_HEADING_LEVEL = 2


def read_markdown(path: Path) -> str:
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise IOFailureError(f"Failed to read {path}: {e}") from e
    return raw.decode("utf-8", errors="replace")


def file_heading(path: Path) -> Heading:
    title = path.name or "Markdown File"
    return Heading(FILE_HEADING_LEVEL, f"File: {title}")


def render_markdown_content(contents: str, markdown_path: Path, engine: LayoutEngine) -> None:
    for command in reduce_events(iter_events(contents), markdown_path):
        engine.apply(command)


def render_markdown_document(files: Iterable[str | Path], engine: LayoutEngine) -> None:
    for file in files:
        path = Path(file)
        log.debug("Rendering %s (page %d)", path, engine.page_index)
        contents = read_markdown(path)
        engine.apply(file_heading(path))
        render_markdown_content(contents, path, engine)


def render_markdown_pdf(
    files: Iterable[str | Path],
    output_path: Path,
    *,
    title: str = DOCUMENT_TITLE,
    font_dir: Path | None = FONT_DIR,
) -> int:
    """Render markdown files, in order, into one PDF at ``output_path``.

    Nothing is written unless every file renders; returns the page count.
    """
    files = [Path(f) for f in files]
    surface = PdfSurface(width_mm=PAGE_WIDTH_MM, height_mm=PAGE_HEIGHT_MM, title=title, font_dir=font_dir)
    engine = LayoutEngine(
        surface,
        page_width_mm=PAGE_WIDTH_MM,
        page_height_mm=PAGE_HEIGHT_MM,
        margin_mm=MARGIN_MM,
    )
    log.info("Rendering %d markdown file(s) to %s", len(files), output_path)
    render_markdown_document(files, engine)
    surface.save(output_path)
    log.info("Wrote %s (%d page(s))", output_path, engine.page_index)
    return engine.page_index
