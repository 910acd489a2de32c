"""Map-of-Content assembly: folder sections, cross-reference indices, document."""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from ..core import ast
from ..core.ast import AstNode
from ..core.model import Page
from ..core.ports import LinkResolver, NoteRepository
from ..core.serializer import DEFAULT_OPTIONS, RenderOptions, render
from ..core.utils import UNKNOWN_DATE, safe_list
from ..format.links import (
    parse_wiki_link,
    replace_image_embeds,
    resolve_path,
    to_image_node,
    value_to_nodes,
)
from .pages import make_page, sort_by_ctime

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description"
NO_COMMENT = "No comment"
NO_IMAGE = "No image"
NO_TAGS = "No tags"
NO_ADDITIONAL_NOTE = "No additional note"


@dataclass(frozen=True)
class IndexSpec:
    """A cross-reference index over one formula field."""
    field: str
    label: str
    hide_singleton: bool = False

    @property
    def heading_text(self) -> str:
        return f"By {self.label}"


def folder_heading_text(folder: str) -> str:
    """Last non-empty segment of a folder path."""
    parts = [part for part in folder.split("/") if part]
    return parts[-1] if parts else ""


class MocBuilder:
    """
    Builds one MOC tree. Holds its collaborators for a single render and is
    discarded afterwards.
    """

    def __init__(
        self,
        repository: NoteRepository,
        resolver: LinkResolver,
        options: RenderOptions | None = None,
    ):
        self.repository = repository
        self.resolver = resolver
        self.options = options or DEFAULT_OPTIONS

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def build_pages(self, folder: str) -> list[Page]:
        records = self.repository.list_notes(folder)
        pages = sort_by_ctime(make_page(r) for r in records)
        logger.debug("Folder %r: %d pages", folder, len(pages))
        return pages

    # ------------------------------------------------------------------
    # Item section pieces
    # ------------------------------------------------------------------

    def title_line(self, page: Page) -> AstNode:
        title = page.meta.get("title") or page.basename
        url = page.meta.get("url")
        title_node = ast.anchor(str(url), str(title)) if url else ast.text(str(title))
        return ast.paragraph(
            [
                ast.anchor(f"#{page.basename}", "section"),
                ast.text(" | "),
                title_node,
                ast.text(" | "),
                ast.block_ref(page.path, "file"),
            ]
        )

    def tag_paragraph(self, page: Page) -> AstNode:
        values = (
            safe_list(page.meta.get("categories"))
            + safe_list(page.meta.get("keywords"))
            + page.formula.tags
        )
        nodes: list[AstNode] = []
        for value in values:
            if nodes:
                nodes.append(ast.text(", "))
            nodes.append(self._tag_node(value))
        if not nodes:
            return ast.paragraph([ast.text(NO_TAGS)])
        return ast.paragraph(nodes)

    def _tag_node(self, value: Any) -> AstNode:
        link = parse_wiki_link(value) if isinstance(value, str) else None
        if link is None:
            return ast.raw_text(f"#{value}")
        display = f"#{link.display}" if link.display else None
        return ast.block_ref(resolve_path(link, self.resolver), display)

    def image_node(self, page: Page) -> AstNode:
        image = page.formula.image
        node = None
        if isinstance(image, str):
            link = parse_wiki_link(image)
            if link:
                node = to_image_node(link, self.resolver, self.options.image_width)
            elif image.startswith(("http://", "https://")):
                node = ast.image(src=image, width=self.options.image_width)
        return node or ast.paragraph([ast.text(NO_IMAGE)])

    def comment_blockquote(self, page: Page) -> AstNode:
        comment = page.meta.get("comment")
        body = str(comment).replace("<br>", "\n") if comment else NO_COMMENT
        body = replace_image_embeds(body, self.resolver, self.options)
        return ast.blockquote([ast.paragraph([ast.raw_text(body)])])

    def additional_info(self, info: dict[str, Any]) -> AstNode:
        """Two-column key/value table, or a placeholder paragraph."""
        if not info:
            return ast.paragraph([ast.text(NO_ADDITIONAL_NOTE)])
        head = ast.table_head(
            [ast.table_row([ast.table_cell([ast.text("")]), ast.table_cell([ast.text("")])])]
        )
        rows = [
            ast.table_row(
                [
                    ast.table_cell([ast.raw_text(str(key))]),
                    ast.table_cell(
                        value_to_nodes(
                            value, self.resolver, image_width=self.options.image_width
                        )
                    ),
                ]
            )
            for key, value in info.items()
        ]
        return ast.table([head, *rows])

    def item_section(self, page: Page) -> list[AstNode]:
        meta = page.meta
        return [
            ast.heading(3, [ast.raw_text(page.basename)]),
            self.title_line(page),
            ast.paragraph([ast.raw_text(str(meta.get("description") or NO_DESCRIPTION))]),
            self.tag_paragraph(page),
            self.image_node(page),
            ast.paragraph([ast.raw_text(f"Created at: {page.ctime or UNKNOWN_DATE}")]),
            self.comment_blockquote(page),
            self.additional_info(page.formula.additional_info),
        ]

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def summary_list(self, pages: Iterable[Page]) -> AstNode:
        return ast.bullet_list([ast.list_item([self.title_line(p)]) for p in pages])

    def build_folder_section(
        self, folder: str, pages: list[Page] | None = None
    ) -> list[AstNode]:
        """Heading, summary list and one item section per page."""
        if pages is None:
            pages = self.build_pages(folder)
        nodes = [
            ast.heading(2, [ast.raw_text(folder_heading_text(folder))]),
            self.summary_list(pages),
        ]
        for page in pages:
            nodes.extend(self.item_section(page))
        return nodes

    def group_pages(
        self, pages: Iterable[Page], field: str, hide_singleton: bool = False
    ) -> list[tuple[str, list[Page]]]:
        """Group pages by every value of ``field``; groups sorted by key."""
        groups: dict[str, list[Page]] = {}
        for page in pages:
            for value in safe_list(page.field(field)):
                key = self._group_key(value)
                members = groups.setdefault(key, [])
                if page not in members:
                    members.append(page)
        entries = sorted(groups.items(), key=lambda item: item[0])
        if hide_singleton:
            entries = [(k, v) for k, v in entries if len(v) >= 2]
        return entries

    def _group_key(self, value: Any) -> str:
        link = parse_wiki_link(value) if isinstance(value, str) else None
        if link is None:
            return str(value)
        return resolve_path(link, self.resolver)

    def collect_pages(self, folders: Iterable[str]) -> list[Page]:
        seen: set[str] = set()
        pages = []
        for folder in folders:
            for page in self.build_pages(folder):
                if page.path not in seen:
                    seen.add(page.path)
                    pages.append(page)
        return pages

    def build_index(
        self,
        folders: Iterable[str],
        field: str,
        singular_label: str,
        hide_singleton: bool = False,
        pages: list[Page] | None = None,
    ) -> list[AstNode]:
        """Cross-reference section grouping every page by ``field``."""
        spec = IndexSpec(field, singular_label, hide_singleton)
        if pages is None:
            pages = self.collect_pages(folders)
        entries = self.group_pages(pages, field, hide_singleton)
        logger.debug("Index %r: %d groups", field, len(entries))

        summary = ast.bullet_list(
            [
                ast.list_item(
                    [
                        ast.paragraph(
                            [ast.anchor(f"#{key}", key), ast.text(f" ({len(members)})")]
                        )
                    ]
                )
                for key, members in entries
            ]
        )
        nodes = [ast.heading(2, [ast.raw_text(spec.heading_text)]), summary]
        for key, members in entries:
            nodes.append(ast.heading(3, [ast.raw_text(key)]))
            nodes.append(
                ast.bullet_list([ast.list_item([self.title_line(p)]) for p in members])
            )
        return nodes

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def build_document(
        self, folders: list[str], indices: Iterable[IndexSpec] = ()
    ) -> AstNode:
        """Table of contents in a blockquote, then folders, then indices."""
        toc_items = []
        sections: list[AstNode] = []
        all_pages: list[Page] = []
        seen: set[str] = set()

        for folder in folders:
            pages = self.build_pages(folder)
            heading_text = folder_heading_text(folder)
            toc_items.append(
                ast.list_item(
                    [
                        ast.paragraph([ast.anchor(f"#{heading_text}", heading_text)]),
                        self.summary_list(pages),
                    ]
                )
            )
            sections.extend(self.build_folder_section(folder, pages))
            for page in pages:
                if page.path not in seen:
                    seen.add(page.path)
                    all_pages.append(page)

        for spec in indices:
            toc_items.append(
                ast.list_item(
                    [ast.paragraph([ast.anchor(f"#{spec.heading_text}", spec.heading_text)])]
                )
            )
            sections.extend(
                self.build_index(
                    folders, spec.field, spec.label, spec.hide_singleton, pages=all_pages
                )
            )

        toc = ast.blockquote([ast.bullet_list(toc_items)])
        return ast.doc([toc, *sections])


def render_moc(
    repository: NoteRepository,
    resolver: LinkResolver,
    folders: list[str],
    indices: Iterable[IndexSpec] = (),
    options: RenderOptions | None = None,
) -> str:
    """Build and serialize a complete MOC document."""
    builder = MocBuilder(repository, resolver, options)
    document = builder.build_document(folders, indices)
    return render(document, builder.options)
