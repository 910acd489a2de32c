from typing import Protocol, Any
from .model import NoteRecord, ResolvedTarget


class NoteRepository(Protocol):
    """
    Source of note records. Ordering is the implementation's natural order;
    callers re-sort where order matters.
    """

    def list_notes(self, prefix: str) -> list[NoteRecord]:
        pass


class LinkResolver(Protocol):
    """
    Short link name -> canonical path. Never raises for unknown targets.
    """

    def resolve_link(self, path: str) -> ResolvedTarget | None:
        pass


class FrontmatterCodec(Protocol):
    """
    Read optional frontmatter without enforcing schema.
    """

    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        pass

    def split(self, text: str) -> tuple[str | None, str]:
        pass


class ExportAdapter(Protocol):
    def export(self, document: str) -> None:
        pass
