"""Tests for watch mode functionality."""

import threading
from pathlib import Path

from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from mocgen.watch import DebounceHandler, watch_vault


class Batches:
    def __init__(self):
        self.calls = []

    def __call__(self, changed, deleted):
        self.calls.append((changed, deleted))


def test_handler_collects_note_changes(tmp_path):
    batches = Batches()
    handler = DebounceHandler(tmp_path, batches, debounce_ms=0)

    handler.on_created(FileCreatedEvent(str(tmp_path / "Videos" / "a.md")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / "b.md")))
    handler.on_deleted(FileDeletedEvent(str(tmp_path / "c.md")))
    handler.check_and_flush()

    assert batches.calls == [({"Videos/a.md", "b.md"}, {"c.md"})]
    assert not handler.changed and not handler.deleted


def test_handler_skips_non_notes(tmp_path):
    batches = Batches()
    handler = DebounceHandler(tmp_path, batches, debounce_ms=0)

    for name in (".hidden.md", "a.md~", "a.md.swp", "image.png"):
        handler.on_modified(FileModifiedEvent(str(tmp_path / name)))
    handler.on_created(DirCreatedEvent(str(tmp_path / "new.md")))
    handler.flush()

    assert batches.calls == []


def test_handler_ignores_output_note(tmp_path):
    batches = Batches()
    out = tmp_path / "MOC.md"
    handler = DebounceHandler(tmp_path, batches, debounce_ms=0, ignore={out})

    handler.on_modified(FileModifiedEvent(str(out)))
    handler.flush()
    assert batches.calls == []


def test_handler_move_is_delete_plus_change(tmp_path):
    batches = Batches()
    handler = DebounceHandler(tmp_path, batches, debounce_ms=0)

    handler.on_moved(FileMovedEvent(str(tmp_path / "old.md"), str(tmp_path / "new.md")))
    handler.flush()
    assert batches.calls == [({"new.md"}, {"old.md"})]


def test_handler_waits_for_debounce(tmp_path):
    batches = Batches()
    handler = DebounceHandler(tmp_path, batches, debounce_ms=60_000)

    handler.on_modified(FileModifiedEvent(str(tmp_path / "a.md")))
    handler.check_and_flush()
    assert batches.calls == []

    handler.flush()
    assert batches.calls == [({"a.md"}, set())]


def test_watch_vault_missing(tmp_path, capsys):
    code = watch_vault(Path(tmp_path / "missing"), render=lambda: None)
    assert code == 1
    assert "Vault not found" in capsys.readouterr().err


class CountingLock:
    def __init__(self):
        self._lock = threading.Lock()
        self.entered = 0

    def __enter__(self):
        self._lock.acquire()
        self.entered += 1
        return self

    def __exit__(self, *exc):
        self._lock.release()


def test_handler_guards_pending_sets_with_lock(tmp_path):
    batches = Batches()
    handler = DebounceHandler(tmp_path, batches, debounce_ms=0)
    handler._lock = CountingLock()

    handler.on_modified(FileModifiedEvent(str(tmp_path / "a.md")))
    handler.flush()

    assert handler._lock.entered == 2
    assert batches.calls == [({"a.md"}, set())]


def test_event_during_batch_is_kept_for_next_flush(tmp_path):
    """The batch callback runs outside the lock and new events are not lost."""
    calls = []

    def on_batch(changed, deleted):
        calls.append(changed)
        if len(calls) == 1:
            handler.on_modified(FileModifiedEvent(str(tmp_path / "late.md")))

    handler = DebounceHandler(tmp_path, on_batch, debounce_ms=0)
    handler.on_modified(FileModifiedEvent(str(tmp_path / "a.md")))
    handler.flush()
    handler.flush()

    assert calls == [{"a.md"}, {"late.md"}]


def test_concurrent_events_are_all_delivered(tmp_path):
    seen: set[str] = set()
    handler = DebounceHandler(tmp_path, lambda changed, deleted: seen.update(changed), debounce_ms=0)

    def produce(start):
        for i in range(start, start + 200):
            handler.on_modified(FileModifiedEvent(str(tmp_path / f"n{i}.md")))

    threads = [threading.Thread(target=produce, args=(k * 200,)) for k in range(4)]
    for t in threads:
        t.start()
    while any(t.is_alive() for t in threads):
        handler.flush()
    for t in threads:
        t.join()
    handler.flush()

    assert seen == {f"n{i}.md" for i in range(800)}
