"""Tests for link parsing and value classification."""

import datetime as dt

import pytest

from conftest import FakeResolver
from mocgen.core import ast
from mocgen.core.model import Link
from mocgen.core.serializer import render
from mocgen.format.links import (
    parse_md_link,
    parse_wiki_link,
    replace_image_embeds,
    to_image_node,
    to_md_link,
    to_wiki_link,
    value_to_nodes,
)


@pytest.fixture
def resolver():
    return FakeResolver(
        {
            "Note": "dir/Note.md",
            "pic.png": "assets/pic.png",
            "doc.pdf": "files/doc.pdf",
        }
    )


def _render_inline(nodes) -> str:
    return render(ast.paragraph(nodes))


def test_parse_wiki_link_bare():
    assert parse_wiki_link("[[A]]") == Link(path="A", display=None)


def test_parse_wiki_link_display():
    assert parse_wiki_link("[[A|B]]") == Link(path="A", display="B")


def test_parse_wiki_link_splits_on_first_pipe():
    assert parse_wiki_link("[[a|b|c]]") == Link(path="a", display="b|c")


@pytest.mark.parametrize("value", [None, "", "A", "[A](b)", " [[A]]", "[[A]] tail", "[A]"])
def test_parse_wiki_link_rejects(value):
    assert parse_wiki_link(value) is None


def test_parse_md_link():
    assert parse_md_link("[X](Y)") == Link(path="Y", display="X")
    assert parse_md_link("[[A]]") is None
    assert parse_md_link(None) is None
    assert parse_md_link("plain") is None


def test_to_wiki_link_is_block_ref():
    assert render(to_wiki_link(Link("a/b.md", "B"))) == "[B](<a/b.md>)"


def test_to_md_link_resolved(resolver):
    assert render(to_md_link(Link("Note"), resolver)) == "[dir/Note\\.md](<dir/Note.md>)"
    assert render(to_md_link(Link("Note", "see"), resolver)) == "[see](<dir/Note.md>)"


def test_to_md_link_unresolved_uses_raw_path(resolver):
    assert render(to_md_link(Link("Missing"), resolver)) == "[Missing](<Missing>)"


def test_to_image_node(resolver):
    node = to_image_node(Link("pic.png", "cap"), resolver)
    assert render(node) == '<img src="assets/pic.png" width=200 alt="cap"/>'
    node = to_image_node(Link("pic.png"), resolver, width=80)
    assert render(node) == '<img src="assets/pic.png" width=80 alt=""/>'


def test_to_image_node_rejects_non_images(resolver):
    assert to_image_node(Link("Note"), resolver) is None
    assert to_image_node(Link("doc.pdf"), resolver) is None
    assert to_image_node(Link("gone.png"), resolver) is None


def test_value_wiki_link_to_image(resolver):
    nodes = value_to_nodes("[[pic.png]]", resolver)
    assert [n.kind for n in nodes] == [
        ast.NodeKind.TEXT_MARK,
        ast.NodeKind.BR,
        ast.NodeKind.IMAGE,
    ]
    assert _render_inline(nodes) == (
        '[assets/pic\\.png](<assets/pic.png>)<br><img src="assets/pic.png" width=200 alt=""/>'
    )


def test_value_wiki_link_to_note(resolver):
    assert _render_inline(value_to_nodes("[[Note|N]]", resolver)) == "[N](<dir/Note.md>)"


def test_value_md_link(resolver):
    assert _render_inline(value_to_nodes("[Site](https://e.com)", resolver)) == (
        "[Site](<https://e.com>)"
    )


def test_value_url(resolver):
    assert _render_inline(value_to_nodes("https://e.com/x", resolver)) == (
        "[https://e\\.com/x](<https://e.com/x>)"
    )


def test_value_mailto(resolver):
    assert _render_inline(value_to_nodes("mailto:me@x.org", resolver)) == (
        "[me@x\\.org](<mailto:me@x.org>)"
    )


@pytest.mark.parametrize(
    "value",
    ["2024-05-01T10:20:30+08:00", "2024-05-01T10:20:30Z", "2024-05-01T10:20:30.123Z"],
)
def test_value_iso_timestamp_is_raw(resolver, value):
    nodes = value_to_nodes(value, resolver)
    assert [n.kind for n in nodes] == [ast.NodeKind.RAW_TEXT]
    assert _render_inline(nodes) == value


def test_value_plain_text_escaped_or_raw(resolver):
    assert _render_inline(value_to_nodes("a-b", resolver)) == "a\\-b"
    assert _render_inline(value_to_nodes("a-b", resolver, raw_text=True)) == "a-b"


def test_value_non_strings(resolver):
    assert value_to_nodes(None, resolver) == []
    assert _render_inline(value_to_nodes(["a", "b"], resolver)) == "a<br>b"
    assert _render_inline(value_to_nodes(True, resolver)) == "true"
    assert _render_inline(value_to_nodes(3, resolver)) == "3"
    assert _render_inline(value_to_nodes(dt.date(2024, 1, 2), resolver)) == "2024\\-01\\-02"
    assert _render_inline(value_to_nodes({"k": "v"}, resolver)) == "k: v"


def test_replace_image_embeds(resolver):
    text = "before ![[pic.png|300]] after"
    assert replace_image_embeds(text, resolver) == (
        'before <img src="assets/pic.png" width=300 alt="300"/> after'
    )


def test_replace_image_embeds_drops_unresolvable(resolver):
    assert replace_image_embeds("a ![[nope.png|100]] b", resolver) == "a  b"


def test_replace_image_embeds_multiple(resolver):
    text = "![[pic.png|10]]\n![[gone.jpg|20]]\n![[pic.png|30]]"
    assert replace_image_embeds(text, resolver) == (
        '<img src="assets/pic.png" width=10 alt="10"/>\n'
        "\n"
        '<img src="assets/pic.png" width=30 alt="30"/>'
    )


def test_replace_image_embeds_leaves_other_text(resolver):
    text = "![[doc.pdf|100]] and [[pic.png]] and ![[pic.png]]"
    assert replace_image_embeds(text, resolver) == text


def test_replace_image_embeds_terminates_on_self_matching_output():
    """A replacement that itself looks like an embed is not rescanned."""
    resolver = FakeResolver({"x.png": "![[x.png|1]].png"})
    assert replace_image_embeds("![[x.png|5]]", resolver) == (
        '<img src="![[x.png|1]].png" width=5 alt="5"/>'
    )
