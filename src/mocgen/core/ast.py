"""Markdown AST model: a closed set of node kinds and their factories."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_IMAGE_WIDTH = 200


class NodeKind(str, Enum):
    DOCUMENT = "NodeDocument"
    HEADING = "NodeHeading"
    PARAGRAPH = "NodeParagraph"
    LIST = "NodeList"
    LIST_ITEM = "NodeListItem"
    TEXT = "NodeText"
    RAW_TEXT = "NodeMDText"
    TEXT_MARK = "NodeTextMark"
    BLOCKQUOTE = "NodeBlockquote"
    BLOCKQUOTE_MARKER = "NodeBlockquoteMarker"
    IMAGE = "NodeImage"
    BANG = "NodeBang"
    OPEN_BRACKET = "NodeOpenBracket"
    CLOSE_BRACKET = "NodeCloseBracket"
    OPEN_PAREN = "NodeOpenParen"
    CLOSE_PAREN = "NodeCloseParen"
    LINK_TEXT = "NodeLinkText"
    LINK_DEST = "NodeLinkDest"
    TABLE = "NodeTable"
    TABLE_HEAD = "NodeTableHead"
    TABLE_ROW = "NodeTableRow"
    TABLE_CELL = "NodeTableCell"
    BR = "NodeBr"


class TextMarkKind(str, Enum):
    ANCHOR = "a"
    BLOCK_REF = "block-ref"


@dataclass(frozen=True)
class TextMark:
    kind: TextMarkKind
    href: str | None = None  # ANCHOR only
    block_ref_id: str | None = None  # BLOCK_REF only
    text_content: str | None = None


@dataclass
class AstNode:
    kind: NodeKind
    data: str | None = None
    children: list[AstNode] = field(default_factory=list)
    heading_level: int | None = None
    text_mark: TextMark | None = None
    properties: dict[str, Any] | None = None

    def set_children(self, children: list[AstNode]) -> AstNode:
        self.children = list(children)
        return self

    def find_child(self, kind: NodeKind) -> AstNode | None:
        for child in self.children:
            if child.kind is kind:
                return child
        return None

    def __str__(self) -> str:
        from .serializer import render

        return render(self)


def _node(kind: NodeKind, children: list[AstNode] | None = None, **kwargs: Any) -> AstNode:
    return AstNode(kind, children=list(children or []), **kwargs)


def doc(children: list[AstNode] | None = None) -> AstNode:
    return _node(NodeKind.DOCUMENT, children)


def heading(level: int, children: list[AstNode] | None = None) -> AstNode:
    return _node(NodeKind.HEADING, children, heading_level=level)


def paragraph(children: list[AstNode] | None = None) -> AstNode:
    return _node(NodeKind.PARAGRAPH, children)


def bullet_list(items: list[AstNode] | None = None) -> AstNode:
    return _node(NodeKind.LIST, items)


def list_item(children: list[AstNode] | None = None) -> AstNode:
    return _node(NodeKind.LIST_ITEM, children)


def text(data: str) -> AstNode:
    """Plain text; markdown punctuation is escaped on render."""
    return AstNode(NodeKind.TEXT, data=data)


def raw_text(data: str) -> AstNode:
    """Already-markdown text; rendered verbatim."""
    return AstNode(NodeKind.RAW_TEXT, data=data)


def anchor(href: str, text_content: str | None = None) -> AstNode:
    mark = TextMark(TextMarkKind.ANCHOR, href=href, text_content=text_content)
    return AstNode(NodeKind.TEXT_MARK, text_mark=mark)


def block_ref(block_ref_id: str, text_content: str | None = None) -> AstNode:
    mark = TextMark(
        TextMarkKind.BLOCK_REF, block_ref_id=block_ref_id, text_content=text_content
    )
    return AstNode(NodeKind.TEXT_MARK, text_mark=mark)


def br() -> AstNode:
    return AstNode(NodeKind.BR, data="br")


def blockquote_marker(marker: str = ">") -> AstNode:
    return AstNode(NodeKind.BLOCKQUOTE_MARKER, data=marker)


def blockquote(children: list[AstNode] | None = None, marker: str = ">") -> AstNode:
    """Blockquote whose first child is always its marker."""
    return _node(NodeKind.BLOCKQUOTE, [blockquote_marker(marker), *(children or [])])


def link_text(data: str) -> AstNode:
    return AstNode(NodeKind.LINK_TEXT, data=data)


def link_dest(data: str) -> AstNode:
    return AstNode(NodeKind.LINK_DEST, data=data)


def image(src: str, alt: str = "", width: int = DEFAULT_IMAGE_WIDTH) -> AstNode:
    # Mirrors the ![alt](src) token layout; only LinkText/LinkDest carry data.
    return _node(
        NodeKind.IMAGE,
        [
            AstNode(NodeKind.BANG),
            AstNode(NodeKind.OPEN_BRACKET),
            link_text(alt),
            AstNode(NodeKind.CLOSE_BRACKET),
            AstNode(NodeKind.OPEN_PAREN),
            link_dest(src),
            AstNode(NodeKind.CLOSE_PAREN),
        ],
        properties={"width": width},
    )


def table(children: list[AstNode] | None = None) -> AstNode:
    return _node(NodeKind.TABLE, children)


def table_head(rows: list[AstNode] | None = None) -> AstNode:
    return _node(NodeKind.TABLE_HEAD, rows)


def table_row(cells: list[AstNode] | None = None) -> AstNode:
    return _node(NodeKind.TABLE_ROW, cells)


def table_cell(children: list[AstNode] | None = None) -> AstNode:
    return _node(NodeKind.TABLE_CELL, children)
