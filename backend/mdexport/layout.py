from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from PIL import Image

from .commands import BulletList, CodeBlock, Heading, ImageRef, Paragraph, RenderCommand, Rule
from .errors import ImageDecodeError, NotFoundError
from .logging_utils import get_logger
from .pdf_surface import FontFace
from .text_wrap import max_code_chars, split_code_line, wrap_text
from .units import line_height_mm, pt_to_mm, px_to_mm

log = get_logger(__name__)

PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0
MARGIN_MM = 15.0
MAX_IMAGE_HEIGHT_MM = 120.0
IMAGE_DPI = 96.0

BODY_SIZE = 11.0
CODE_SIZE = 9.5
_HEADING_SIZES = {1: 24.0, 2: 18.0, 3: 14.0}
_HEADING_MIN_SIZE = 12.0

LIST_INDENT_MM = 6.0
CODE_INDENT_MM = 4.0
CODE_TAB_WIDTH = 4
BULLET = "\u2022"

# Trailing gaps, in points.
HEADING_GAP = 8.0
PARAGRAPH_GAP = 6.0
LIST_ITEM_GAP = 2.0
LIST_GAP = 4.0
CODE_GAP = 6.0
IMAGE_GAP = 6.0
RULE_GAP = 8.0

_WEB_PREFIXES = ("http://", "https://")


@dataclass(frozen=True)
class ImageFit:
    width_mm: float
    height_mm: float
    scale: float


def heading_size(level: int) -> float:
    return _HEADING_SIZES.get(level, _HEADING_MIN_SIZE)


def fit_image(
    width_px: int,
    height_px: int,
    *,
    max_width_mm: float,
    max_height_mm: float = MAX_IMAGE_HEIGHT_MM,
    dpi: float = IMAGE_DPI,
) -> ImageFit:
    """Physical size of an image, shrunk to the content width first and then
    to the maximum height. The second scale compounds the first."""
    width_mm = px_to_mm(width_px, dpi)
    height_mm = px_to_mm(height_px, dpi)
    scale = 1.0
    if width_mm > max_width_mm:
        scale = max_width_mm / width_mm
        width_mm = max_width_mm
        height_mm = height_mm * scale
    if height_mm > max_height_mm:
        height_scale = max_height_mm / height_mm
        scale *= height_scale
        width_mm = width_mm * height_scale
        height_mm = max_height_mm
    return ImageFit(width_mm=width_mm, height_mm=height_mm, scale=scale)


def is_web_reference(destination: str) -> bool:
    return destination.strip().lower().startswith(_WEB_PREFIXES)


def _anchor(base_path: Path, raw: Path) -> Path:
    if raw.is_absolute():
        return raw
    return base_path.parent / raw


def resolve_image_path(base_path: Path, destination: str) -> Path:
    """Resolve an image destination against the markdown file's directory.

    A file whose name literally contains percent escapes wins; otherwise the
    destination is percent-decoded, undoing markdown-it's link encoding.
    """
    dest = destination.strip()
    literal = _anchor(base_path, Path(dest))
    if literal.is_file():
        return literal
    return _anchor(base_path, Path(unquote(dest)))


class LayoutEngine:
    """Page and cursor state for one document.

    The cursor is a distance from the bottom edge of the page. A new page
    starts it at ``page_height - margin`` and every primitive moves it down;
    ``ensure_space`` is the only place that breaks pages.
    """

    def __init__(
        self,
        surface,
        *,
        page_width_mm: float = PAGE_WIDTH_MM,
        page_height_mm: float = PAGE_HEIGHT_MM,
        margin_mm: float = MARGIN_MM,
    ) -> None:
        self.surface = surface
        self.page_width_mm = page_width_mm
        self.page_height_mm = page_height_mm
        self.margin_mm = margin_mm
        self.fonts = surface.fonts
        self.page_index = 0
        self.cursor_y = 0.0
        self.add_page()

    @property
    def content_width_mm(self) -> float:
        return self.page_width_mm - 2.0 * self.margin_mm

    def max_text_width_mm(self, indent_mm: float = 0.0) -> float:
        return self.content_width_mm - indent_mm

    def add_page(self) -> None:
        self.surface.add_page()
        self.page_index += 1
        self.cursor_y = self.page_height_mm - self.margin_mm
        if self.page_index > 1:
            log.debug("Page break -> page %d", self.page_index)

    def ensure_space(self, height_mm: float) -> None:
        if self.cursor_y - height_mm < self.margin_mm:
            self.add_page()

    def _skip(self, gap_mm: float) -> None:
        self.cursor_y = max(self.cursor_y - gap_mm, self.margin_mm)

    def _write_lines(self, lines: list[str], font: FontFace, font_size: float, indent_mm: float) -> None:
        line_height = line_height_mm(font_size)
        for line in lines:
            self.ensure_space(line_height)
            self.surface.draw_text(
                line,
                x_mm=self.margin_mm + indent_mm,
                y_mm=self.cursor_y,
                font=font,
                size=font_size,
            )
            self.cursor_y -= line_height

    def heading(self, level: int, text: str) -> None:
        font_size = heading_size(level)
        lines = wrap_text(text, font_size, self.max_text_width_mm())
        self._write_lines(lines, self.fonts.bold, font_size, 0.0)
        self._skip(pt_to_mm(HEADING_GAP))

    def paragraph(self, text: str) -> None:
        lines = wrap_text(text, BODY_SIZE, self.max_text_width_mm())
        self._write_lines(lines, self.fonts.regular, BODY_SIZE, 0.0)
        self._skip(pt_to_mm(PARAGRAPH_GAP))

    def bullet_list(self, items: list[str] | tuple[str, ...]) -> None:
        line_height = line_height_mm(BODY_SIZE)
        for item in items:
            lines = wrap_text(item, BODY_SIZE, self.max_text_width_mm(LIST_INDENT_MM))
            self.ensure_space(line_height)
            self.surface.draw_text(
                BULLET,
                x_mm=self.margin_mm,
                y_mm=self.cursor_y,
                font=self.fonts.regular,
                size=BODY_SIZE,
            )
            self.surface.draw_text(
                lines[0],
                x_mm=self.margin_mm + LIST_INDENT_MM,
                y_mm=self.cursor_y,
                font=self.fonts.regular,
                size=BODY_SIZE,
            )
            self.cursor_y -= line_height
            if len(lines) > 1:
                self._write_lines(lines[1:], self.fonts.regular, BODY_SIZE, LIST_INDENT_MM)
            self._skip(pt_to_mm(LIST_ITEM_GAP))
        self._skip(pt_to_mm(LIST_GAP))

    def code_block(self, text: str) -> None:
        max_chars = max_code_chars(CODE_SIZE, self.max_text_width_mm(CODE_INDENT_MM))
        chunks: list[str] = []
        # Character budget counts expanded tabs.
        for line in text.expandtabs(CODE_TAB_WIDTH).splitlines():
            chunks.extend(split_code_line(line, max_chars))
        self._write_lines(chunks, self.fonts.mono, CODE_SIZE, CODE_INDENT_MM)
        self._skip(pt_to_mm(CODE_GAP))

    def image(self, base_path: Path, destination: str) -> ImageFit | None:
        if is_web_reference(destination):
            log.debug("Skipping remote image %s", destination)
            return None

        image_path = resolve_image_path(base_path, destination)
        if not image_path.is_file():
            raise NotFoundError(f"Image not found: {image_path}")

        try:
            with Image.open(image_path) as img:
                width_px, height_px = img.size
                rgb = img.convert("RGB")
        except (OSError, Image.DecompressionBombError) as e:
            raise ImageDecodeError(f"Failed to open image {image_path}: {e}") from e

        fit = fit_image(width_px, height_px, max_width_mm=self.max_text_width_mm())
        gap = pt_to_mm(IMAGE_GAP)
        self.ensure_space(fit.height_mm + gap)
        y = self.cursor_y - fit.height_mm
        self.surface.draw_image(
            rgb,
            x_mm=self.margin_mm,
            y_mm=y,
            width_mm=fit.width_mm,
            height_mm=fit.height_mm,
        )
        self._skip(fit.height_mm + gap)
        return fit

    def rule(self) -> None:
        gap = pt_to_mm(RULE_GAP)
        y = self.cursor_y - gap / 2.0
        if y >= self.margin_mm:
            self.surface.draw_line(
                x1_mm=self.margin_mm,
                x2_mm=self.page_width_mm - self.margin_mm,
                y_mm=y,
            )
        self._skip(gap)

    def apply(self, command: RenderCommand) -> None:
        if isinstance(command, Heading):
            self.heading(command.level, command.text)
        elif isinstance(command, Paragraph):
            self.paragraph(command.text)
        elif isinstance(command, BulletList):
            self.bullet_list(command.items)
        elif isinstance(command, CodeBlock):
            self.code_block(command.text)
        elif isinstance(command, ImageRef):
            self.image(command.base_path, command.destination)
        elif isinstance(command, Rule):
            self.rule()
        else:
            raise TypeError(f"Unknown render command: {command!r}")
