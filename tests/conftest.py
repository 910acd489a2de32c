"""Shared fakes and fixtures for mocgen tests."""

from pathlib import Path, PurePosixPath

import pytest

from mocgen.core.model import NoteRecord, ResolvedTarget


class FakeResolver:
    """Resolver backed by a plain ``link -> canonical path`` mapping."""

    def __init__(self, targets: dict[str, str] | None = None):
        self.targets = dict(targets or {})

    def resolve_link(self, path: str) -> ResolvedTarget | None:
        canonical = self.targets.get(path)
        if canonical is None:
            return None
        return ResolvedTarget(canonical, PurePosixPath(canonical).suffix.lstrip("."))


class FakeRepository:
    """Repository over an in-memory list of records."""

    def __init__(self, records: list[NoteRecord]):
        self.records = records

    def list_notes(self, prefix: str) -> list[NoteRecord]:
        return [r for r in self.records if r.path.startswith(prefix)]


def record(path: str, meta: dict | None = None, tags: list[str] | None = None) -> NoteRecord:
    return NoteRecord(
        path=path,
        basename=PurePosixPath(path).stem,
        metadata=dict(meta or {}),
        tags=list(tags or []),
    )


def write_note(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def vault_dir(tmp_path: Path) -> Path:
    """Small on-disk vault with two video notes, an image and a topic note."""
    root = tmp_path / "vault"
    write_note(root, "Videos/Intro.md", """---
title: Intro
url: https://example.com/intro
ctime: 2024-01-10T09:00:00+08:00
categories: ["[[Tutorials]]"]
tags: [python]
cover: "[[cover.png]]"
---

An intro video. #beginner
""")
    write_note(root, "Videos/Deep Dive.md", """---
title: Deep Dive
ctime: 2024-03-01T12:00:00Z
description: Internals
tags: [python, internals]
comment: Great<br>![[cover.png|150]]
---

Body.
""")
    write_note(root, "Topics/Tutorials.md", "# Tutorials\n")
    (root / "assets").mkdir(parents=True)
    (root / "assets" / "cover.png").write_bytes(b"\x89PNG")
    return root
