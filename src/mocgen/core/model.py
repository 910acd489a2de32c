from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

NotePath = str


@dataclass(frozen=True)
class Link:
    path: str  # target as written, before resolution
    display: str | None = None  # "[[path|display]]" label


@dataclass(frozen=True)
class ResolvedTarget:
    canonical_path: NotePath
    extension: str  # without the leading dot, e.g. "png"


@dataclass
class NoteRecord:
    path: NotePath  # vault-relative, "/" separated
    basename: str  # file stem
    metadata: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)  # tags found in the body


@dataclass(frozen=True)
class Formula:
    """Derived per-note fields; never present verbatim in frontmatter."""

    tags: list[str]
    categories: list[Any]
    additional_info: dict[str, Any]
    image: Any = None
    year: str = "Unknown"
    month: str = "Unknown"
    day: str = "Unknown Day"


@dataclass(frozen=True)
class Page:
    record: NoteRecord
    meta: dict[str, Any]
    formula: Formula

    @property
    def path(self) -> NotePath:
        return self.record.path

    @property
    def basename(self) -> str:
        return self.record.basename

    @property
    def ctime(self) -> str | None:
        value = self.meta.get("ctime")
        return str(value) if value else None

    def field(self, name: str) -> Any:
        """Formula field by name, falling back to raw frontmatter."""
        if name in Formula.__dataclass_fields__:
            return getattr(self.formula, name)
        return self.meta.get(name)
