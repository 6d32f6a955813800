from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from .commands import BulletList, CodeBlock, Heading, ImageRef, Paragraph, RenderCommand, Rule
from .events import Event, EventKind
from .logging_utils import get_logger

log = get_logger(__name__)


@dataclass
class Accumulator:
    text: list[str] = field(default_factory=list)
    heading_level: int | None = None
    in_paragraph: bool = False
    list_depth: int = 0
    item_depth: int = 0
    items: list[str] = field(default_factory=list)
    item: list[str] | None = None
    in_code: bool = False
    code: list[str] = field(default_factory=list)
    image_dest: str | None = None

    def open_constructs(self) -> list[str]:
        names: list[str] = []
        if self.in_paragraph:
            names.append("paragraph")
        if self.heading_level is not None:
            names.append("heading")
        if self.list_depth:
            names.append("list")
        if self.in_code:
            names.append("code block")
        if self.image_dest is not None:
            names.append("image")
        return names


class MarkdownReducer:
    """Folds the flat event stream of one markdown file into render commands.

    ``feed`` returns at most one command per event; nothing is buffered
    across construct boundaries.
    """

    def __init__(self, markdown_path: Path) -> None:
        self.markdown_path = markdown_path
        self.state = Accumulator()

    def _append_text(self, text: str) -> None:
        s = self.state
        if s.item is not None:
            s.item.append(text)
        else:
            s.text.append(text)

    def _take_text(self) -> str:
        s = self.state
        text = "".join(s.text).strip()
        s.text = []
        return text

    def _commit_item(self) -> None:
        s = self.state
        if s.item is None:
            return
        text = "".join(s.item).strip()
        if text:
            s.items.append(text)
        s.item = []

    def feed(self, event: Event) -> RenderCommand | None:
        s = self.state
        kind = event.kind

        if kind == EventKind.TEXT:
            if s.in_code:
                s.code.append(event.text)
            else:
                self._append_text(event.text)
            return None

        if kind == EventKind.CODE:
            self._append_text(event.text)
            return None

        if kind == EventKind.SOFT_BREAK:
            if s.in_code:
                s.code.append("\n")
            else:
                self._append_text(" ")
            return None

        if kind == EventKind.HARD_BREAK:
            if s.in_code:
                s.code.append("\n")
            else:
                self._append_text("\n")
            return None

        if kind == EventKind.PARAGRAPH_OPEN:
            s.in_paragraph = True
            s.text = []
            return None

        if kind == EventKind.PARAGRAPH_CLOSE:
            was_open = s.in_paragraph
            s.in_paragraph = False
            text = self._take_text()
            # Paragraphs of loose list items feed the item, not the page.
            if was_open and s.item is None:
                return Paragraph(text)
            return None

        if kind == EventKind.HEADING_OPEN:
            s.heading_level = event.level
            s.text = []
            return None

        if kind == EventKind.HEADING_CLOSE:
            level = s.heading_level
            s.heading_level = None
            text = self._take_text()
            if level is not None:
                return Heading(level, text)
            return None

        if kind == EventKind.LIST_OPEN:
            if s.list_depth == 0:
                s.items = []
            s.list_depth += 1
            return None

        if kind == EventKind.LIST_CLOSE:
            s.list_depth = max(0, s.list_depth - 1)
            if s.list_depth == 0:
                items = tuple(s.items)
                s.items = []
                if items:
                    return BulletList(items)
            return None

        if kind == EventKind.ITEM_OPEN:
            # Nested item: the outer item's text so far goes first.
            if s.item_depth:
                self._commit_item()
            s.item_depth += 1
            s.item = []
            return None

        if kind == EventKind.ITEM_CLOSE:
            self._commit_item()
            s.item_depth = max(0, s.item_depth - 1)
            s.item = [] if s.item_depth else None
            return None

        if kind == EventKind.CODE_BLOCK_OPEN:
            s.in_code = True
            s.code = []
            return None

        if kind == EventKind.CODE_BLOCK_CLOSE:
            was_open = s.in_code
            s.in_code = False
            code = "".join(s.code)
            s.code = []
            if was_open:
                return CodeBlock(code)
            return None

        if kind == EventKind.IMAGE_OPEN:
            s.image_dest = event.dest
            return None

        if kind == EventKind.IMAGE_CLOSE:
            dest = s.image_dest
            s.image_dest = None
            if dest is not None:
                return ImageRef(self.markdown_path, dest)
            return None

        if kind == EventKind.RULE:
            return Rule()

        return None

    def finish(self) -> None:
        dropped = self.state.open_constructs()
        if dropped:
            log.warning(
                "Dropping unterminated %s at end of %s",
                ", ".join(dropped),
                self.markdown_path,
            )
        self.state = Accumulator()


def reduce_events(events: Iterable[Event], markdown_path: Path) -> Iterator[RenderCommand]:
    reducer = MarkdownReducer(markdown_path)
    for event in events:
        command = reducer.feed(event)
        if command is not None:
            yield command
    reducer.finish()
