"""Configuration loader for moc.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .builder.moc import IndexSpec
from .core.ast import DEFAULT_IMAGE_WIDTH
from .core.serializer import RenderOptions

CONFIG_NAME = "moc.toml"


@dataclass
class VaultConfig:
    """Vault-specific configuration."""
    root: Path


@dataclass
class IndexConfig:
    """One cross-reference index (categories, tags, months, ...)."""
    field: str
    label: str
    hide_singleton: bool = False

    def to_spec(self) -> IndexSpec:
        return IndexSpec(self.field, self.label, self.hide_singleton)


@dataclass
class MocConfig:
    """What to render and where to write it."""
    folders: list[str] = field(default_factory=list)
    out: Path | None = None
    indices: list[IndexConfig] = field(default_factory=list)


@dataclass
class RenderConfig:
    """Markdown marker characters."""
    heading_marker: str = "#"
    tab: str = "\t"
    dash: str = "-"
    image_width: int = DEFAULT_IMAGE_WIDTH

    def to_options(self) -> RenderOptions:
        return RenderOptions(
            heading_marker=self.heading_marker,
            tab=self.tab,
            dash=self.dash,
            image_width=self.image_width,
        )


@dataclass
class AppConfig:
    """Complete mocgen configuration."""
    vault: VaultConfig
    moc: MocConfig
    render: RenderConfig


def parse_index_spec(value: str) -> IndexConfig:
    """
    Parse a ``FIELD[:LABEL]`` command-line index spec.

    Examples:
        >>> parse_index_spec("tags:Tag")
        IndexConfig(field='tags', label='Tag', hide_singleton=False)
        >>> parse_index_spec("categories").label
        'Categories'
    """
    name, _, label = value.partition(":")
    name = name.strip()
    if not name:
        raise ValueError(f"Invalid index spec: {value!r}")
    return IndexConfig(field=name, label=label.strip() or name.capitalize())


def _index_configs(raw: Any) -> list[IndexConfig]:
    if not raw:
        return []
    if isinstance(raw, dict):
        raw = [raw]
    out = []
    for item in raw:
        if isinstance(item, str):
            out.append(parse_index_spec(item))
            continue
        if "field" not in item:
            raise ValueError(f"Index entry without 'field': {item!r}")
        out.append(
            IndexConfig(
                field=item["field"],
                label=item.get("label", str(item["field"]).capitalize()),
                hide_singleton=bool(item.get("hide_singleton", False)),
            )
        )
    return out


def load_config(config_path: Path | None = None, vault_path: Path | None = None) -> AppConfig:
    """
    Load configuration from moc.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/moc.toml
    3. vault_path/moc.toml

    Args:
        config_path: Explicit path to config file
        vault_path: Vault root path for fallback search

    Returns:
        AppConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if vault_path:
        search_paths.append(vault_path / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    vault_data = toml_data.get("vault", {})
    vault_config = VaultConfig(
        root=Path(vault_data.get("root", vault_path or Path("./vault"))),
    )

    moc_data = toml_data.get("moc", {})
    out = moc_data.get("out")
    moc_config = MocConfig(
        folders=list(moc_data.get("folders", [])),
        out=Path(out) if out else None,
        indices=_index_configs(moc_data.get("index")),
    )

    render_data = toml_data.get("render", {})
    render_config = RenderConfig(
        heading_marker=render_data.get("heading_marker", "#"),
        tab=render_data.get("tab", "\t"),
        dash=render_data.get("dash", "-"),
        image_width=int(render_data.get("image_width", DEFAULT_IMAGE_WIDTH)),
    )

    return AppConfig(
        vault=vault_config,
        moc=moc_config,
        render=render_config,
    )
