import logging
from pathlib import Path, PurePosixPath

from ..core.model import ResolvedTarget
from ..core.ports import LinkResolver
from .fs_storage import iter_vault_files

logger = logging.getLogger(__name__)


def strip_subpath(link: str) -> str:
    """Drop ``#heading`` / ``#^block`` suffixes from a link target."""
    return link.split("#", 1)[0].strip()


class VaultResolver(LinkResolver):
    """
    Resolve short link names against every file in a vault.

    Exact vault-relative paths win; otherwise the shortest path whose file
    name matches. The file listing is read once per resolver.
    """

    def __init__(self, root: Path):
        self.root = root
        self._paths: list[str] | None = None

    def _all_paths(self) -> list[str]:
        if self._paths is None:
            self._paths = [
                p.relative_to(self.root).as_posix() for p in iter_vault_files(self.root)
            ]
        return self._paths

    def _target(self, rel: str) -> ResolvedTarget:
        return ResolvedTarget(
            canonical_path=rel, extension=PurePosixPath(rel).suffix.lstrip(".")
        )

    def resolve_link(self, path: str) -> ResolvedTarget | None:
        link = strip_subpath(path).lstrip("/")
        if not link:
            return None
        paths = self._all_paths()
        wanted = [link] if link.endswith(".md") else [link, f"{link}.md"]

        for candidate in wanted:
            if candidate in paths:
                return self._target(candidate)

        suffixes = tuple(f"/{w.lower()}" for w in wanted)
        matches = [p for p in paths if f"/{p.lower()}".endswith(suffixes)]
        if not matches:
            logger.debug("No vault file for link %r", path)
            return None
        best = min(matches, key=lambda p: (len(p), p))
        return self._target(best)
