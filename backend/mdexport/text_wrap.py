"""Approximate-width line breaking.

Widths are estimated from an average glyph width per point of font size
instead of real font metrics, so the result only depends on the input.
"""

from __future__ import annotations

from .units import mm_to_pt

AVG_CHAR_WIDTH = 0.52
MONO_CHAR_WIDTH = 0.6


def estimate_width_pt(text: str, font_size: float) -> float:
    return len(text) * font_size * AVG_CHAR_WIDTH


def wrap_text(text: str, font_size: float, max_width_mm: float) -> list[str]:
    max_width_pt = mm_to_pt(max_width_mm)
    char_width = font_size * AVG_CHAR_WIDTH
    lines: list[str] = []
    current: list[str] = []
    current_width = 0.0

    for word in text.split():
        word_width = len(word) * char_width
        if current:
            next_width = current_width + char_width + word_width
        else:
            next_width = word_width
        if next_width > max_width_pt and current:
            lines.append(" ".join(current).rstrip())
            current = []
            current_width = 0.0
        if current:
            current_width += char_width
        current.append(word)
        current_width += word_width

    if current:
        lines.append(" ".join(current).rstrip())
    if not lines:
        lines.append("")
    return lines


def max_code_chars(font_size: float, max_width_mm: float) -> int:
    return max(1, int(mm_to_pt(max_width_mm) / (font_size * MONO_CHAR_WIDTH)))


def split_code_line(line: str, max_chars: int) -> list[str]:
    if len(line) <= max_chars:
        return [line]
    return [line[i : i + max_chars] for i in range(0, len(line), max_chars)]
