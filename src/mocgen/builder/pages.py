"""Page records and their derived formula fields."""

from typing import Any, Iterable

from ..core.model import Formula, NoteRecord, Page
from ..core.utils import date_parts, safe_list, unique

# Frontmatter keys rendered by dedicated parts of an item section.
RESERVED_KEYS = frozenset(
    {
        "title",
        "url",
        "ctime",
        "description",
        "cover",
        "icon",
        "comment",
        "keywords",
        "categories",
        "tags",
    }
)


def _index_tag(tag: str) -> str:
    return tag[1:] if tag.startswith("#") else tag


def compute_formula(meta: dict[str, Any], index_tags: Iterable[str]) -> Formula:
    tags = unique(
        safe_list(meta.get("tags")) + [_index_tag(t) for t in index_tags]
    )
    additional_info = {
        key: value
        for key, value in meta.items()
        if key not in RESERVED_KEYS and value is not None
    }
    image = meta.get("cover") or meta.get("icon") or meta.get("image")
    ctime = meta.get("ctime")
    year, month, day = date_parts(str(ctime) if ctime else None)
    return Formula(
        tags=tags,
        categories=safe_list(meta.get("categories")),
        additional_info=additional_info,
        image=image,
        year=year,
        month=month,
        day=day,
    )


def make_page(record: NoteRecord) -> Page:
    meta = dict(record.metadata or {})
    return Page(record=record, meta=meta, formula=compute_formula(meta, record.tags))


def sort_by_ctime(pages: Iterable[Page]) -> list[Page]:
    """Newest first by ISO ``ctime`` string; pages without one go last."""
    pages = list(pages)
    dated = sorted(
        (p for p in pages if p.ctime), key=lambda p: p.ctime or "", reverse=True
    )
    undated = [p for p in pages if not p.ctime]
    return dated + undated
