"""Recursive AST -> markdown serializer.

Every NodeKind is either rendered by an entry in ``_RENDERERS`` or is
listed in ``STRUCTURAL_KINDS``; the latter only appear as Image children and
are read through Image's child lookup.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from .ast import DEFAULT_IMAGE_WIDTH, AstNode, NodeKind, TextMarkKind
from .utils import escape_markdown

_WS = re.compile(r"\s+")


class StructuralNodeError(ValueError):
    """Raised when a structural-only node is rendered on its own."""


@dataclass(frozen=True)
class RenderOptions:
    heading_marker: str = "#"
    tab: str = "\t"
    dash: str = "-"
    image_width: int = DEFAULT_IMAGE_WIDTH


DEFAULT_OPTIONS = RenderOptions()

STRUCTURAL_KINDS = frozenset(
    {
        NodeKind.BANG,
        NodeKind.OPEN_BRACKET,
        NodeKind.CLOSE_BRACKET,
        NodeKind.OPEN_PAREN,
        NodeKind.CLOSE_PAREN,
        NodeKind.LINK_TEXT,
        NodeKind.LINK_DEST,
    }
)

Renderer = Callable[[AstNode, RenderOptions, int], str]


def render(node: AstNode, options: RenderOptions | None = None, indent: int = -1) -> str:
    """Serialize ``node`` and its subtree to markdown text.

    Args:
        node: Root of the subtree
        options: Marker characters and default image width
        indent: Current list nesting level; -1 outside any list

    Returns:
        Markdown text. Rendering is pure: the same tree always yields the
        same string.
    """
    opts = options or DEFAULT_OPTIONS
    if node.kind in STRUCTURAL_KINDS:
        raise StructuralNodeError(
            f"{node.kind.value} is only rendered as part of an image"
        )
    return _RENDERERS[node.kind](node, opts, indent)


def _children(node: AstNode, opts: RenderOptions, indent: int) -> list[str]:
    return [render(child, opts, indent) for child in node.children]


def _document(node: AstNode, opts: RenderOptions, indent: int) -> str:
    return "\n\n".join(_children(node, opts, indent))


def _heading(node: AstNode, opts: RenderOptions, indent: int) -> str:
    level = node.heading_level or 1
    return f"{opts.heading_marker * level} {''.join(_children(node, opts, indent))}"


def _raw_text(node: AstNode, opts: RenderOptions, indent: int) -> str:
    return node.data or ""


def _text(node: AstNode, opts: RenderOptions, indent: int) -> str:
    return escape_markdown(node.data or "")


def _text_mark(node: AstNode, opts: RenderOptions, indent: int) -> str:
    mark = node.text_mark
    if mark is None:
        return ""
    if mark.kind is TextMarkKind.ANCHOR:
        href = mark.href or ""
        content = escape_markdown(mark.text_content) if mark.text_content else href
        return f"[{content}](<{href}>)"
    ref = mark.block_ref_id or ""
    content = escape_markdown(mark.text_content or ref)
    return f"[{content}](<{ref}>)"


def _image(node: AstNode, opts: RenderOptions, indent: int) -> str:
    dest = node.find_child(NodeKind.LINK_DEST)
    alt = node.find_child(NodeKind.LINK_TEXT)
    src = dest.data if dest and dest.data is not None else ""
    alt_text = alt.data if alt and alt.data is not None else ""
    width = (node.properties or {}).get("width", opts.image_width)
    html = f'<img src="{src}" width={width} alt="{alt_text}"/>'
    return _WS.sub(" ", html).strip()


def _blockquote_marker(node: AstNode, opts: RenderOptions, indent: int) -> str:
    return node.data or ">"


def _blockquote(node: AstNode, opts: RenderOptions, indent: int) -> str:
    marker_node = node.find_child(NodeKind.BLOCKQUOTE_MARKER)
    marker = _blockquote_marker(marker_node, opts, indent) if marker_node else ">"
    body = "\n".join(
        render(child, opts, indent)
        for child in node.children
        if child.kind is not NodeKind.BLOCKQUOTE_MARKER
    )
    return "\n".join(f"{marker} {line}" for line in body.split("\n"))


def _paragraph(node: AstNode, opts: RenderOptions, indent: int) -> str:
    return "".join(_children(node, opts, indent))


def _list_item(node: AstNode, opts: RenderOptions, indent: int) -> str:
    # Only the first physical line of the item carries the dash.
    emitted = 0
    parts = []
    for child in node.children:
        rendered = render(child, opts, indent)
        if child.kind is NodeKind.LIST:
            emitted += len(rendered.split("\n"))
            parts.append(rendered)
            continue
        lines = []
        for line in rendered.split("\n"):
            bullet = opts.dash if emitted == 0 else " "
            lines.append(f"{opts.tab * indent}{bullet} {line}")
            emitted += 1
        parts.append("\n".join(lines))
    return "\n".join(parts)


def _list(node: AstNode, opts: RenderOptions, indent: int) -> str:
    return "\n".join(render(child, opts, indent + 1) for child in node.children)


def _table(node: AstNode, opts: RenderOptions, indent: int) -> str:
    head = node.find_child(NodeKind.TABLE_HEAD)
    rows = [child for child in node.children if child.kind is NodeKind.TABLE_ROW]
    columns = len(head.children[0].children) if head and head.children else 0
    lines = [
        render(head, opts, indent) if head else "",
        "|" + " --- |" * columns if columns else "",
        *(render(row, opts, indent) for row in rows),
    ]
    return "\n".join(line for line in lines if line)


def _table_head(node: AstNode, opts: RenderOptions, indent: int) -> str:
    return "\n".join(
        render(row, opts, indent)
        for row in node.children
        if row.kind is NodeKind.TABLE_ROW
    )


def _table_row(node: AstNode, opts: RenderOptions, indent: int) -> str:
    cells = [
        render(cell, opts, indent)
        for cell in node.children
        if cell.kind is NodeKind.TABLE_CELL
    ]
    return "| " + " | ".join(cells) + " |"


def _table_cell(node: AstNode, opts: RenderOptions, indent: int) -> str:
    return "".join(_children(node, opts, indent))


def _br(node: AstNode, opts: RenderOptions, indent: int) -> str:
    return "<br>"


_RENDERERS: dict[NodeKind, Renderer] = {
    NodeKind.DOCUMENT: _document,
    NodeKind.HEADING: _heading,
    NodeKind.PARAGRAPH: _paragraph,
    NodeKind.LIST: _list,
    NodeKind.LIST_ITEM: _list_item,
    NodeKind.TEXT: _text,
    NodeKind.RAW_TEXT: _raw_text,
    NodeKind.TEXT_MARK: _text_mark,
    NodeKind.BLOCKQUOTE: _blockquote,
    NodeKind.BLOCKQUOTE_MARKER: _blockquote_marker,
    NodeKind.IMAGE: _image,
    NodeKind.TABLE: _table,
    NodeKind.TABLE_HEAD: _table_head,
    NodeKind.TABLE_ROW: _table_row,
    NodeKind.TABLE_CELL: _table_cell,
    NodeKind.BR: _br,
}
