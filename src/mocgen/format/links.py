"""Link parsing and value classification for MOC rendering."""

import datetime as dt
import logging
import re
from typing import Any

from ..core import ast
from ..core.ast import AstNode
from ..core.model import Link
from ..core.ports import LinkResolver
from ..core.serializer import DEFAULT_OPTIONS, RenderOptions, render

logger = logging.getLogger(__name__)

BARE_LINK_RE = re.compile(r"\[\[(.*)\]\]")
DISPLAY_LINK_RE = re.compile(r"\[\[(.*?)\|(.*)\]\]")
MD_LINK_RE = re.compile(r"\[(.*)\]\((.*)\)")
URL_RE = re.compile(r"^https?://")
ISO_TIMESTAMP_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})"
)
IMAGE_EMBED_RE = re.compile(
    r"!(?P<wikilink>\[\[(?P<path>.*?\.(?:png|jpg|webp|svg))\|(?P<width>\d+)\]\])"
)

IMAGE_EXTENSIONS = frozenset({"jpg", "png", "webp", "svg"})
MAILTO = "mailto:"


def parse_wiki_link(value: str | None) -> Link | None:
    """Parse ``[[path]]`` or ``[[path|display]]``.

    The display form is tried first; the path stops at the first ``|``.
    """
    if not value:
        return None
    m = DISPLAY_LINK_RE.fullmatch(value)
    if m:
        return Link(path=m.group(1), display=m.group(2))
    m = BARE_LINK_RE.fullmatch(value)
    if m:
        return Link(path=m.group(1))
    return None


def parse_md_link(value: str | None) -> Link | None:
    """Parse ``[display](path)``."""
    if not value:
        return None
    m = MD_LINK_RE.fullmatch(value)
    if m:
        return Link(path=m.group(2), display=m.group(1))
    return None


def to_wiki_link(link: Link) -> AstNode:
    return ast.block_ref(link.path, link.display)


def resolve_path(link: Link, resolver: LinkResolver) -> str:
    """Canonical path of ``link``, or its raw path when unresolved."""
    target = resolver.resolve_link(link.path)
    if target is None:
        logger.debug("Unresolved link target: %s", link.path)
        return link.path
    return target.canonical_path


def to_md_link(link: Link, resolver: LinkResolver) -> AstNode:
    href = resolve_path(link, resolver)
    return ast.anchor(href, link.display or href)


def to_image_node(
    link: Link, resolver: LinkResolver, width: int = ast.DEFAULT_IMAGE_WIDTH
) -> AstNode | None:
    """Image node for ``link`` if it resolves to an image file, else None."""
    target = resolver.resolve_link(link.path)
    if target is None or target.extension.lower() not in IMAGE_EXTENSIONS:
        return None
    return ast.image(src=target.canonical_path, alt=link.display or "", width=width)


def value_to_nodes(
    value: Any,
    resolver: LinkResolver,
    raw_text: bool = False,
    image_width: int = ast.DEFAULT_IMAGE_WIDTH,
) -> list[AstNode]:
    """Classify an arbitrary metadata value into inline nodes.

    Strings are tried as wiki-link, markdown link, URL, mailto address and
    ISO timestamp, in that order. Anything else becomes escaped text, or
    verbatim text when ``raw_text`` is set.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return _join_br(
            value_to_nodes(v, resolver, raw_text, image_width) for v in value
        )
    if isinstance(value, dict):
        return _join_br(
            [ast.text(f"{k}: "), *value_to_nodes(v, resolver, raw_text, image_width)]
            for k, v in value.items()
        )
    if isinstance(value, bool):
        return [ast.text("true" if value else "false")]
    if isinstance(value, (dt.date, dt.datetime)):
        value = value.isoformat()
    if not isinstance(value, str):
        return [ast.text(str(value))]

    wiki = parse_wiki_link(value)
    if wiki:
        nodes = [to_md_link(wiki, resolver)]
        img = to_image_node(wiki, resolver, image_width)
        if img:
            nodes += [ast.br(), img]
        return nodes
    md = parse_md_link(value)
    if md:
        return [to_md_link(md, resolver)]
    if URL_RE.match(value):
        return [ast.anchor(value, value)]
    if value.startswith(MAILTO):
        return [ast.anchor(value, value[len(MAILTO):])]
    if ISO_TIMESTAMP_RE.fullmatch(value):
        return [ast.raw_text(value)]
    return [ast.raw_text(value) if raw_text else ast.text(value)]


def _join_br(groups: Any) -> list[AstNode]:
    out: list[AstNode] = []
    for group in groups:
        out.append(ast.br())
        out.extend(group)
    return out[1:]


def replace_image_embeds(
    text: str, resolver: LinkResolver, options: RenderOptions | None = None
) -> str:
    """Replace ``![[img.png|300]]`` embeds with ``<img>`` tags.

    Unresolvable embeds are removed. Scanning resumes after each
    replacement, so the loop terminates whatever the replacement contains.
    """
    opts = options or DEFAULT_OPTIONS
    pos = 0
    while True:
        m = IMAGE_EMBED_RE.search(text, pos)
        if not m:
            return text
        link = parse_wiki_link(m.group("wikilink"))
        node = to_image_node(link, resolver, int(m.group("width"))) if link else None
        if node is None:
            logger.debug("Dropping unresolvable image embed: %s", m.group(0))
            replacement = ""
        else:
            replacement = render(node, opts)
        text = text[: m.start()] + replacement + text[m.end():]
        pos = m.start() + len(replacement)
