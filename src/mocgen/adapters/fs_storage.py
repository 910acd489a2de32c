import re
from pathlib import Path
from typing import Iterable
from ..core.model import NoteRecord
from ..core.ports import FrontmatterCodec, NoteRepository

# Inline #tags, not inside words, URLs or headings ("# Title" has a space).
TAG_RE = re.compile(r"(?<![`\w/#&])#([\w/-]+)")
FENCE_RE = re.compile(r"^```.*?^```[^\n]*$", re.DOTALL | re.MULTILINE)
INLINE_CODE_RE = re.compile(r"`[^`\n]*`")


def extract_tags(body: str) -> list[str]:
    """Body ``#tags`` outside code, with the leading ``#``, de-duped."""
    text = INLINE_CODE_RE.sub("", FENCE_RE.sub("", body))
    seen: list[str] = []
    for m in TAG_RE.finditer(text):
        if m.group(1).isdigit():  # "#123" is not a tag
            continue
        tag = f"#{m.group(1)}"
        if tag not in seen:
            seen.append(tag)
    return seen


def iter_vault_files(root: Path, pattern: str = "*") -> Iterable[Path]:
    """Files under ``root`` matching ``pattern``, skipping hidden directories."""
    if not root.exists():
        return []
    return (
        p
        for p in sorted(root.rglob(pattern))
        if p.is_file() and not any(part.startswith(".") for part in p.relative_to(root).parts)
    )


class FsNoteRepository(NoteRepository):
    """Markdown vault on disk: every ``*.md`` below ``root``."""

    def __init__(self, root: Path, codec: FrontmatterCodec):
        self.root = root
        self.codec = codec

    def _rel(self, p: Path) -> str:
        return p.relative_to(self.root).as_posix()

    def read_record(self, p: Path) -> NoteRecord:
        meta, body = self.codec.decode(p.read_text(encoding="utf-8"))
        return NoteRecord(
            path=self._rel(p),
            basename=p.stem,
            metadata=meta,
            tags=extract_tags(body),
        )

    def list_notes(self, prefix: str) -> list[NoteRecord]:
        return [
            self.read_record(p)
            for p in iter_vault_files(self.root, "*.md")
            if self._rel(p).startswith(prefix)
        ]
