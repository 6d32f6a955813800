from __future__ import annotations

MM_PER_PT = 0.3527777778
LINE_HEIGHT_FACTOR = 1.25


def pt_to_mm(pt: float) -> float:
    return pt * MM_PER_PT


def mm_to_pt(mm: float) -> float:
    return mm / MM_PER_PT


def line_height_mm(font_size: float) -> float:
    return pt_to_mm(font_size * LINE_HEIGHT_FACTOR)


def px_to_mm(px: float, dpi: float) -> float:
    return px * 25.4 / dpi
