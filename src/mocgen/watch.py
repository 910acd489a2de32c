"""Watch mode for mocgen - re-render the MOC when vault notes change."""

import json
import logging
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class DebounceHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(
        self,
        vault_path: Path,
        on_batch: Callable[[set[str], set[str]], None],
        debounce_ms: int = 150,
        ignore: set[Path] | None = None,
    ):
        super().__init__()
        self.vault_path = vault_path
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms
        # Usually the MOC note itself: writing it must not trigger a re-render.
        self.ignore = {p.resolve() for p in (ignore or set())}

        # Track pending changes by vault-relative path
        self.changed: set[str] = set()
        self.deleted: set[str] = set()
        self.last_event_time = 0.0
        # Observer thread records, main thread flushes
        self._lock = threading.Lock()

    def _should_skip(self, path: Path) -> bool:
        """Check if file should be skipped."""
        name = path.name

        # Skip hidden files
        if name.startswith("."):
            return True

        # Skip temp/swap files
        if name.endswith("~") or name.endswith(".swp") or name.startswith(".#"):
            return True

        # Only notes feed the MOC
        if not name.endswith(".md"):
            return True

        return path.resolve() in self.ignore

    def _rel_path(self, path: Path) -> str | None:
        """Vault-relative note path, or None for skipped files."""
        if self._should_skip(path):
            return None
        try:
            return path.resolve().relative_to(self.vault_path.resolve()).as_posix()
        except ValueError:
            return path.as_posix()

    def _record(self, src_path: Any, bucket: set[str]) -> None:
        rel = self._rel_path(Path(str(src_path)))
        if rel:
            with self._lock:
                bucket.add(rel)
                self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, self.changed)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, self.changed)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, self.deleted)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, self.deleted)
            self._record(getattr(event, "dest_path", ""), self.changed)

    def check_and_flush(self) -> None:
        """Check if debounce period has elapsed and flush if so."""
        if not (self.changed or self.deleted):
            return

        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        """Process accumulated events."""
        with self._lock:
            if not (self.changed or self.deleted):
                return
            changed = set(self.changed)
            deleted = set(self.deleted)
            self.changed.clear()
            self.deleted.clear()

        if self.on_batch:
            self.on_batch(changed, deleted)


def watch_vault(
    vault_path: Path,
    render: Callable[[], None],
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
    ignore: set[Path] | None = None,
) -> int:
    """
    Watch vault directory and re-render the MOC after each batch of changes.

    Args:
        vault_path: Path to vault directory
        render: Callback that renders and exports the MOC
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable
        ignore: Files whose changes never trigger a render

    Returns:
        Exit code
    """
    if not vault_path.exists():
        print(f"Error: Vault not found: {vault_path}", file=sys.stderr)
        return 1

    running = True

    def handle_batch(changed: set[str], deleted: set[str]) -> None:
        """Render once for a batch of changes."""
        start_time = time.time()

        try:
            render()
            duration_ms = int((time.time() - start_time) * 1000)

            if json_output:
                event = {
                    "type": "render",
                    "changed": sorted(changed),
                    "deleted": sorted(deleted),
                    "duration_ms": duration_ms,
                }
                print(json.dumps(event), flush=True)
            elif not quiet:
                print(
                    f"Rendered: ~{len(changed)} -{len(deleted)} ({duration_ms}ms)",
                    flush=True,
                )
        except Exception as e:
            logger.exception("Render failed")
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handler = DebounceHandler(vault_path, handle_batch, debounce_ms, ignore=ignore)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=True)

    if not quiet and not json_output:
        print(f"Watching {vault_path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()

    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
