import logging
from pathlib import Path

from ..adapters.yaml_codec import YamlFrontmatter
from ..core.ports import ExportAdapter, FrontmatterCodec

logger = logging.getLogger(__name__)


class NoteExporter(ExportAdapter):
    """Write a rendered MOC into a target note.

    The target's existing frontmatter block is kept byte-for-byte; only the
    body is replaced.
    """

    def __init__(self, out: Path, codec: FrontmatterCodec | None = None):
        self.out = out
        self.codec = codec or YamlFrontmatter()

    def compose(self, document: str, existing: str | None = None) -> str:
        header = None
        if existing:
            header, _body = self.codec.split(existing)
        body = document if document.endswith("\n") else document + "\n"
        if header is None:
            return body
        if not header.endswith("\n"):
            header += "\n"
        return f"{header}\n{body}"

    def export(self, document: str) -> None:
        existing = self.out.read_text(encoding="utf-8") if self.out.exists() else None
        self.out.parent.mkdir(parents=True, exist_ok=True)
        self.out.write_text(self.compose(document, existing), encoding="utf-8")
        logger.info("Wrote MOC to %s", self.out)
