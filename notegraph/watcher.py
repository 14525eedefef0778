"""
File system watcher that reports note-set changes.

This module provides:
- Watchdog-based monitoring of a vault folder
- Debouncing, so an editor's save cycle triggers a single rebuild
- Filtering to relevant files (markdown notes and the graph config)
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config import CONFIG_FILENAME

logger = logging.getLogger(__name__)


class VaultChangeHandler(FileSystemEventHandler):
    """
    Collects file system events and marks the vault dirty.

    Events arrive on the observer thread; ``poll`` is called from the
    consumer's loop and reports a change once no new event has arrived
    for ``debounce_seconds``.
    """

    RELEVANT_EXTENSIONS = {".md", ".json"}
    DEBOUNCE_SECONDS = 0.5

    def __init__(
        self,
        vault_path: Path,
        *,
        debounce_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__()
        self.vault_path = vault_path
        self.debounce_seconds = self.DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._last_event: float | None = None
        self._changed: set[str] = set()

    def is_relevant(self, path: str) -> bool:
        p = Path(path)
        try:
            rel = p.relative_to(self.vault_path)
        except ValueError:
            rel = p
        if any(part.startswith(".") for part in rel.parts):
            return False
        if p.name == CONFIG_FILENAME:
            return True
        return p.suffix.lower() in self.RELEVANT_EXTENSIONS

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        paths = [str(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(str(dest))
        relevant = [p for p in paths if self.is_relevant(p)]
        if not relevant:
            return
        with self._lock:
            self._changed.update(relevant)
            self._last_event = self.clock()

    def poll(self) -> set[str] | None:
        """Return the changed paths once the debounce window has passed."""
        with self._lock:
            if self._last_event is None:
                return None
            if self.clock() - self._last_event < self.debounce_seconds:
                return None
            changed = self._changed
            self._changed = set()
            self._last_event = None
            return changed


def run_watch_loop(
    vault_path: Path,
    on_change: Callable[[set[str]], None],
    *,
    poll_interval: float = 0.2,
    on_idle: Callable[[], None] | None = None,
) -> None:
    """
    Watch the vault and call ``on_change`` after each debounced burst of events.

    Blocks until interrupted (KeyboardInterrupt propagates to the caller).
    ``on_idle`` runs on every poll, e.g. to advance an animation.
    """
    handler = VaultChangeHandler(vault_path)
    observer = Observer()
    watch_root = vault_path if vault_path.is_dir() else vault_path.parent
    observer.schedule(handler, str(watch_root), recursive=True)
    observer.start()
    logger.info("Watching %s", watch_root)

    try:
        while True:
            time.sleep(poll_interval)
            changed = handler.poll()
            if changed:
                logger.debug("Detected %d changed paths", len(changed))
                on_change(changed)
            if on_idle is not None:
                on_idle()
    finally:
        observer.stop()
        observer.join()
