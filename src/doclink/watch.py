"""Re-run validation whenever watched code or documentation changes.

watchdog delivers events on its own thread; they only bump a generation
counter and wake a worker thread. The worker waits for the debounce
interval, runs, and throws the result away if another change arrived
while it was running, so the terminal never shows findings for files
that have since changed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .code import LANGUAGES
from .pipeline import MARKDOWN_SUFFIXES, SKIP_DIRS

log = logging.getLogger(__name__)

DEFAULT_SUFFIXES = frozenset(LANGUAGES) | frozenset(MARKDOWN_SUFFIXES)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: Watcher):
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return
        for raw in (event.src_path, getattr(event, "dest_path", "")):
            # watchdog can return bytes
            path = raw.decode() if isinstance(raw, bytes) else raw
            if path and self.watcher.is_relevant(Path(path)):
                self.watcher.notify()
                return


class Watcher:
    """Debounced, generation-checked re-runs of a validation callable.

    Args:
        paths: Files or directories to watch. Directories are watched
            recursively; for a file its parent directory is watched.
        run: Produces a result from the current files.
        on_result: Receives each result that is still current.
        debounce: Seconds of quiet to wait after a change before running.
        suffixes: File suffixes that trigger a run.
    """

    def __init__(
        self,
        paths: Iterable[Path],
        run: Callable[[], object],
        on_result: Callable[[object], None],
        debounce: float = 0.15,
        suffixes: Iterable[str] = DEFAULT_SUFFIXES,
    ):
        self.paths = [Path(p) for p in paths]
        self.run = run
        self.on_result = on_result
        self.debounce = debounce
        self.suffixes = frozenset(s.lower() for s in suffixes)

        self._lock = threading.Lock()
        self._generation = 0
        self._wake = threading.Event()
        self._stopping = threading.Event()
        self._observer = None
        self._worker: threading.Thread | None = None

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def is_relevant(self, path: Path) -> bool:
        if any(part in SKIP_DIRS for part in path.parts):
            return False
        return path.suffix.lower() in self.suffixes

    def notify(self) -> None:
        """Record that inputs changed; wakes the worker."""
        with self._lock:
            self._generation += 1
        self._wake.set()

    def run_once(self) -> bool:
        """Run once and deliver the result if nothing changed meanwhile.

        Returns:
            False when the result was discarded as stale.
        """
        started = self.generation
        result = self.run()
        if self.generation != started:
            log.info("Inputs changed during run, discarding result")
            return False
        self.on_result(result)
        return True

    def _loop(self) -> None:
        while not self._stopping.is_set():
            self._wake.wait()
            if self._stopping.is_set():
                break
            # Let a burst of saves settle before running
            while True:
                self._wake.clear()
                if self._stopping.wait(self.debounce) or not self._wake.is_set():
                    break
            if self._stopping.is_set():
                break
            log.info("Change detected, re-running")
            while not self._stopping.is_set():
                self._wake.clear()
                if self.run_once():
                    break

    def _watch_targets(self) -> list[tuple[Path, bool]]:
        targets: dict[Path, bool] = {}
        for path in self.paths:
            if path.is_dir():
                targets[path] = True
            else:
                targets.setdefault(path.parent if str(path.parent) else Path("."), False)
        return list(targets.items())

    def start(self, observer_factory=Observer) -> None:
        """Start the file observer and the worker thread."""
        handler = _ChangeHandler(self)
        self._observer = observer_factory()
        for target, recursive in self._watch_targets():
            self._observer.schedule(handler, str(target), recursive=recursive)
            log.debug(f"Watching {target} (recursive={recursive})")
        self._observer.start()

        self._worker = threading.Thread(target=self._loop, name="doclink-watch", daemon=True)
        self._worker.start()

    def stop(self) -> None:
        self._stopping.set()
        self._wake.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
        if self._worker is not None:
            self._worker.join(timeout=5)
