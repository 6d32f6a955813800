from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from fpdf import FPDF
from PIL import Image

from .config import DOCUMENT_TITLE, FONT_DIR
from .errors import SerializationError
from .logging_utils import get_logger

log = get_logger(__name__)

_UNICODE_FONT = {
    "family": "DejaVuSans",
    "files": {
        "": "DejaVuSans.ttf",
        "B": "DejaVuSans-Bold.ttf",
    },
}
_ASCII_REPLACEMENTS = {
    "\u00a0": " ",
    "\u200b": "",
    "\u2010": "-",
    "\u2011": "-",
    "\u2012": "-",
    "\u2013": "-",
    "\u2014": "--",
    "\u2015": "--",
    "\u2212": "-",
    "\u2026": "...",
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": "\"",
    "\u201d": "\"",
    "\u00b7": "*",
    "\u2022": "*",
    "\u2190": "<-",
    "\u2192": "->",
    "\u2194": "<->",
    "\u21d0": "<=",
    "\u21d2": "=>",
    "\u21d4": "<=>",
    "\t": "    ",
}


@dataclass(frozen=True)
class FontFace:
    family: str
    style: str = ""
    unicode: bool = False


@dataclass(frozen=True)
class FontSet:
    regular: FontFace
    bold: FontFace
    mono: FontFace


CORE_FONTS = FontSet(
    regular=FontFace("Helvetica"),
    bold=FontFace("Helvetica", "B"),
    mono=FontFace("Courier"),
)


def _normalize_ascii(text: str) -> str:
    out = text
    for key, val in _ASCII_REPLACEMENTS.items():
        out = out.replace(key, val)
    return out


def sanitize_pdf_text(text: str, *, allow_unicode: bool) -> str:
    if allow_unicode:
        return text.replace("\t", "    ")
    cleaned = _normalize_ascii(text)
    return cleaned.encode("latin-1", "replace").decode("latin-1")


def _register_unicode_font(pdf: FPDF, font_dir: Path | None) -> str | None:
    if font_dir is None or not font_dir.exists():
        return None
    family = _UNICODE_FONT["family"]
    files = _UNICODE_FONT["files"]
    for filename in files.values():
        if not (font_dir / filename).exists():
            return None
    for style, filename in files.items():
        pdf.add_font(family, style=style, fname=str(font_dir / filename))
    return family


class PdfSurface:
    """fpdf2 document addressed in millimetres with a bottom-left origin.

    The layout engine measures its cursor upward from the bottom edge the way
    PDF user space does; fpdf2 places things from the top edge, so every
    y coordinate is flipped here.
    """

    def __init__(
        self,
        *,
        width_mm: float,
        height_mm: float,
        title: str = DOCUMENT_TITLE,
        font_dir: Path | None = FONT_DIR,
    ) -> None:
        self.width_mm = width_mm
        self.height_mm = height_mm
        self._pdf = FPDF(orientation="P", unit="mm", format=(width_mm, height_mm))
        self._pdf.set_auto_page_break(auto=False)
        self._pdf.set_margins(0, 0, 0)
        self._pdf.set_title(sanitize_pdf_text(title, allow_unicode=False))
        self._pdf.set_creator("mdexport")

        unicode_family = _register_unicode_font(self._pdf, font_dir)
        if unicode_family:
            log.debug("Using Unicode font family %s from %s", unicode_family, font_dir)
            self.fonts = FontSet(
                regular=FontFace(unicode_family, "", unicode=True),
                bold=FontFace(unicode_family, "B", unicode=True),
                mono=CORE_FONTS.mono,
            )
        else:
            self.fonts = CORE_FONTS

    @property
    def page_count(self) -> int:
        return self._pdf.page_no()

    def add_page(self) -> None:
        self._pdf.add_page()

    def draw_text(self, text: str, *, x_mm: float, y_mm: float, font: FontFace, size: float) -> None:
        if not text:
            return
        self._pdf.set_font(font.family, font.style, size)
        self._pdf.text(x_mm, self.height_mm - y_mm, sanitize_pdf_text(text, allow_unicode=font.unicode))

    def draw_image(
        self,
        image: Image.Image,
        *,
        x_mm: float,
        y_mm: float,
        width_mm: float,
        height_mm: float,
    ) -> None:
        # y_mm is the bottom edge; fpdf2 wants the top edge.
        top = self.height_mm - y_mm - height_mm
        self._pdf.image(image, x=x_mm, y=top, w=width_mm, h=height_mm)

    def draw_line(self, *, x1_mm: float, x2_mm: float, y_mm: float) -> None:
        y = self.height_mm - y_mm
        self._pdf.set_draw_color(200, 200, 200)
        self._pdf.set_line_width(0.3)
        self._pdf.line(x1_mm, y, x2_mm, y)
        self._pdf.set_draw_color(0, 0, 0)

    def to_bytes(self) -> bytes:
        return bytes(self._pdf.output())

    def save(self, path: Path) -> None:
        try:
            data = self.to_bytes()
            path.write_bytes(data)
        except Exception as e:
            raise SerializationError(f"Failed to write PDF {path}: {e}") from e
        log.debug("Wrote %d bytes to %s", len(data), path)
