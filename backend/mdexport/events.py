from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.front_matter import front_matter_plugin


class EventKind(str, Enum):
    PARAGRAPH_OPEN = "paragraph_open"
    PARAGRAPH_CLOSE = "paragraph_close"
    HEADING_OPEN = "heading_open"
    HEADING_CLOSE = "heading_close"
    LIST_OPEN = "list_open"
    LIST_CLOSE = "list_close"
    ITEM_OPEN = "item_open"
    ITEM_CLOSE = "item_close"
    CODE_BLOCK_OPEN = "code_block_open"
    CODE_BLOCK_CLOSE = "code_block_close"
    IMAGE_OPEN = "image_open"
    IMAGE_CLOSE = "image_close"
    TEXT = "text"
    CODE = "code"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"
    RULE = "rule"


@dataclass(frozen=True)
class Event:
    kind: EventKind
    text: str = ""
    level: int = 0
    dest: str = ""


_BLOCK_KINDS = {
    "paragraph_open": EventKind.PARAGRAPH_OPEN,
    "paragraph_close": EventKind.PARAGRAPH_CLOSE,
    "heading_close": EventKind.HEADING_CLOSE,
    "bullet_list_open": EventKind.LIST_OPEN,
    "ordered_list_open": EventKind.LIST_OPEN,
    "bullet_list_close": EventKind.LIST_CLOSE,
    "ordered_list_close": EventKind.LIST_CLOSE,
    "list_item_open": EventKind.ITEM_OPEN,
    "list_item_close": EventKind.ITEM_CLOSE,
    "hr": EventKind.RULE,
}


def build_markdown_parser() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": True})
    md.use(front_matter_plugin)
    return md


_MD_PARSER: MarkdownIt | None = None


def _get_markdown_parser() -> MarkdownIt:
    global _MD_PARSER
    if _MD_PARSER is None:
        _MD_PARSER = build_markdown_parser()
    return _MD_PARSER


def _heading_level(token: Token) -> int:
    tag = token.tag or ""
    if tag.startswith("h") and tag[1:].isdigit():
        return int(tag[1:])
    return 2


def _inline_events(children: Iterable[Token]) -> Iterator[Event]:
    for child in children:
        t = child.type
        if t == "text":
            yield Event(EventKind.TEXT, text=child.content)
        elif t == "code_inline":
            yield Event(EventKind.CODE, text=child.content)
        elif t == "softbreak":
            yield Event(EventKind.SOFT_BREAK)
        elif t == "hardbreak":
            yield Event(EventKind.HARD_BREAK)
        elif t == "image":
            src = child.attrGet("src")
            yield Event(EventKind.IMAGE_OPEN, dest=str(src or ""))
            yield from _inline_events(child.children or [])
            yield Event(EventKind.IMAGE_CLOSE)


def flatten_tokens(tokens: Iterable[Token]) -> Iterator[Event]:
    """Turn markdown-it's block/inline token tree into one flat event stream.

    Paragraphs hidden by tight lists produce no events, so list item text
    arrives directly between ITEM_OPEN and ITEM_CLOSE.
    """
    for tok in tokens:
        t = tok.type
        if t == "inline":
            yield from _inline_events(tok.children or [])
        elif t in {"paragraph_open", "paragraph_close"} and tok.hidden:
            continue
        elif t == "heading_open":
            yield Event(EventKind.HEADING_OPEN, level=_heading_level(tok))
        elif t in {"fence", "code_block"}:
            yield Event(EventKind.CODE_BLOCK_OPEN)
            if tok.content:
                yield Event(EventKind.TEXT, text=tok.content)
            yield Event(EventKind.CODE_BLOCK_CLOSE)
        elif t in _BLOCK_KINDS:
            yield Event(_BLOCK_KINDS[t])


def iter_events(markdown: str) -> Iterator[Event]:
    tokens = _get_markdown_parser().parse(markdown)
    return flatten_tokens(tokens)
