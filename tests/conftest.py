from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest
from PIL import Image

from backend.mdexport.layout import LayoutEngine
from backend.mdexport.pdf_surface import CORE_FONTS, FontFace


@dataclass
class TextOp:
    page: int
    text: str
    x_mm: float
    y_mm: float
    font: FontFace
    size: float


@dataclass
class ImageOp:
    page: int
    x_mm: float
    y_mm: float
    width_mm: float
    height_mm: float


@dataclass
class LineOp:
    page: int
    x1_mm: float
    x2_mm: float
    y_mm: float


class RecordingSurface:
    """Stands in for PdfSurface and keeps every drawing call."""

    def __init__(self) -> None:
        self.fonts = CORE_FONTS
        self.page_count = 0
        self.ops: list[TextOp | ImageOp | LineOp] = []
        self.saved_to: Path | None = None

    def add_page(self) -> None:
        self.page_count += 1

    def draw_text(self, text, *, x_mm, y_mm, font, size) -> None:
        self.ops.append(TextOp(self.page_count, text, x_mm, y_mm, font, size))

    def draw_image(self, image, *, x_mm, y_mm, width_mm, height_mm) -> None:
        self.ops.append(ImageOp(self.page_count, x_mm, y_mm, width_mm, height_mm))

    def draw_line(self, *, x1_mm, x2_mm, y_mm) -> None:
        self.ops.append(LineOp(self.page_count, x1_mm, x2_mm, y_mm))

    def save(self, path: Path) -> None:
        self.saved_to = path

    def texts(self) -> list[TextOp]:
        return [op for op in self.ops if isinstance(op, TextOp)]

    def images(self) -> list[ImageOp]:
        return [op for op in self.ops if isinstance(op, ImageOp)]

    def lines(self) -> list[LineOp]:
        return [op for op in self.ops if isinstance(op, LineOp)]


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def engine(surface: RecordingSurface) -> LayoutEngine:
    return LayoutEngine(surface)


@pytest.fixture
def make_png(tmp_path: Path):
    def _make(name: str, width: int, height: int, color=(200, 30, 30)) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", (width, height), color).save(path)
        return path

    return _make
