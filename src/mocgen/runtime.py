"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_storage import FsNoteRepository
from .adapters.resolver_index import VaultResolver
from .adapters.yaml_codec import YamlFrontmatter
from .builder.moc import IndexSpec, MocBuilder, render_moc
from .config import AppConfig, load_config


@dataclass
class Runtime:
    """Container for all wired components."""
    repository: FsNoteRepository
    config: AppConfig

    @property
    def vault_path(self) -> Path:
        return self.repository.root

    def resolver(self) -> VaultResolver:
        # Fresh per render: the file listing is cached for one pass only.
        return VaultResolver(self.repository.root)

    def builder(self) -> MocBuilder:
        return MocBuilder(
            self.repository, self.resolver(), self.config.render.to_options()
        )

    def render(
        self,
        folders: list[str] | None = None,
        indices: list[IndexSpec] | None = None,
    ) -> str:
        if folders is None:
            folders = self.config.moc.folders
        if indices is None:
            indices = [ic.to_spec() for ic in self.config.moc.indices]
        return render_moc(
            self.repository,
            self.resolver(),
            folders,
            indices,
            self.config.render.to_options(),
        )


def build_runtime(
    vault_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a vault."""
    config = load_config(config_path=config_path, vault_path=vault_path)

    if vault_path is None:
        vault_path = config.vault.root
    else:
        config.vault.root = vault_path

    repository = FsNoteRepository(vault_path, YamlFrontmatter())

    return Runtime(
        repository=repository,
        config=config,
    )
