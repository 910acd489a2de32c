"""Page and index builder for Map-of-Content documents."""

from .moc import IndexSpec, MocBuilder, folder_heading_text, render_moc
from .pages import RESERVED_KEYS, compute_formula, make_page, sort_by_ctime

__all__ = [
    "IndexSpec",
    "MocBuilder",
    "folder_heading_text",
    "render_moc",
    "RESERVED_KEYS",
    "compute_formula",
    "make_page",
    "sort_by_ctime",
]
