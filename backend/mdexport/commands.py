from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class Paragraph:
    text: str


@dataclass(frozen=True)
class BulletList:
    items: tuple[str, ...]


@dataclass(frozen=True)
class CodeBlock:
    text: str


@dataclass(frozen=True)
class ImageRef:
    base_path: Path
    destination: str


@dataclass(frozen=True)
class Rule:
    pass


RenderCommand = Union[Heading, Paragraph, BulletList, CodeBlock, ImageRef, Rule]
