"""Watch mode tests. The observer is replaced by a recording fake."""

import threading
from pathlib import Path

from doclink.watch import Watcher


class FakeObserver:
    """Stands in for watchdog's Observer; records scheduled paths."""

    def __init__(self):
        self.scheduled = []
        self.started = False
        self.stopped = False

    def schedule(self, handler, path, recursive=False):
        self.handler = handler
        self.scheduled.append((path, recursive))

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def join(self, timeout=None):
        pass


class FakeEvent:
    def __init__(self, src_path, is_directory=False, event_type="modified"):
        self.src_path = src_path
        self.is_directory = is_directory
        self.event_type = event_type


class TestRunOnce:
    def test_delivers_current_result(self):
        delivered = []
        watcher = Watcher([], run=lambda: "ok", on_result=delivered.append)
        assert watcher.run_once() is True
        assert delivered == ["ok"]

    def test_discards_stale_result(self):
        delivered = []

        def run():
            watcher.notify()  # a file changed while we were running
            return "stale"

        watcher = Watcher([], run=run, on_result=delivered.append)
        assert watcher.run_once() is False
        assert delivered == []

    def test_notify_bumps_generation(self):
        watcher = Watcher([], run=lambda: None, on_result=lambda r: None)
        before = watcher.generation
        watcher.notify()
        watcher.notify()
        assert watcher.generation == before + 2


class TestRelevance:
    def test_suffixes(self):
        watcher = Watcher([], run=lambda: None, on_result=lambda r: None)
        assert watcher.is_relevant(Path("src/auth.py"))
        assert watcher.is_relevant(Path("docs/API.MD"))
        assert not watcher.is_relevant(Path("notes.txt"))

    def test_ignored_directories(self):
        watcher = Watcher([], run=lambda: None, on_result=lambda r: None)
        assert not watcher.is_relevant(Path("web/node_modules/x/index.ts"))
        assert not watcher.is_relevant(Path(".doclink/baseline.yaml"))


class TestObserver:
    def test_watch_targets(self, project):
        project.write("src/a.py", "")
        doc = project.write("docs/api.md", "")
        observer = FakeObserver()
        watcher = Watcher([project.path("src"), doc], run=lambda: None, on_result=lambda r: None)
        watcher.start(observer_factory=lambda: observer)
        try:
            assert observer.started
            assert observer.scheduled == [
                (str(project.path("src")), True),
                (str(project.path("docs")), False),
            ]
        finally:
            watcher.stop()
        assert observer.stopped

    def test_change_triggers_run(self, project):
        project.write("src/a.py", "")
        observer = FakeObserver()
        delivered = threading.Event()
        watcher = Watcher(
            [project.path("src")],
            run=lambda: "result",
            on_result=lambda r: delivered.set(),
            debounce=0.01,
        )
        watcher.start(observer_factory=lambda: observer)
        try:
            observer.handler.on_any_event(FakeEvent(str(project.path("src/a.py"))))
            assert delivered.wait(timeout=5)
        finally:
            watcher.stop()

    def test_irrelevant_events_ignored(self, project):
        observer = FakeObserver()
        watcher = Watcher([project.root], run=lambda: None, on_result=lambda r: None)
        watcher.start(observer_factory=lambda: observer)
        try:
            before = watcher.generation
            observer.handler.on_any_event(FakeEvent(str(project.path("notes.txt"))))
            observer.handler.on_any_event(FakeEvent(str(project.path("src")), is_directory=True))
            observer.handler.on_any_event(FakeEvent(str(project.path("a.py")), event_type="opened"))
            assert watcher.generation == before
        finally:
            watcher.stop()
