"""Link parsing and inline value classification."""

from .links import (
    parse_md_link,
    parse_wiki_link,
    replace_image_embeds,
    to_image_node,
    to_md_link,
    to_wiki_link,
    value_to_nodes,
)

__all__ = [
    "parse_wiki_link",
    "parse_md_link",
    "to_wiki_link",
    "to_md_link",
    "to_image_node",
    "value_to_nodes",
    "replace_image_embeds",
]
