# tests/test_watch.py

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from sitebuild.orchestrator import BuildError, ConfigurationError, TaskGraph
from sitebuild.orchestrator.watch import DISPATCHING, IDLE, WatchCoordinator


class Counter:
    def __init__(self) -> None:
        self.calls = 0
        self.lock = threading.Lock()

    def __call__(self, ctx) -> None:
        with self.lock:
            self.calls += 1


@pytest.fixture()
def coordinator_factory(tmp_path: Path):
    made: list[WatchCoordinator] = []

    def make(graph: TaskGraph, bindings: dict, debounce: float = 0.05) -> WatchCoordinator:
        coordinator = WatchCoordinator(graph, bindings, root=tmp_path, debounce=debounce)
        made.append(coordinator)
        return coordinator

    yield make
    for coordinator in made:
        coordinator.stop()


def test_burst_of_changes_coalesces_into_one_run(coordinator_factory) -> None:
    counter = Counter()
    graph = TaskGraph()
    graph.register("styles", (), counter)
    watcher = coordinator_factory(graph, {"src/scss/*.scss": ["styles"]})

    for _ in range(5):
        watcher.notify("src/scss/main.scss")

    assert watcher.wait_idle(5)
    binding = watcher.bindings[0]
    assert binding.dispatches == 1
    assert counter.calls == 1
    assert binding.state == IDLE


def test_changes_during_dispatch_run_exactly_once_more(coordinator_factory) -> None:
    started = threading.Event()
    release = threading.Event()
    calls = []

    def blocking(ctx) -> None:
        calls.append(1)
        started.set()
        release.wait(5)

    graph = TaskGraph()
    graph.register("html", (), blocking)
    watcher = coordinator_factory(graph, {"src/**/*.html": "html"}, debounce=0)

    watcher.notify("src/index.html")
    assert started.wait(5)
    binding = watcher.bindings[0]
    assert binding.state == DISPATCHING
    watcher.notify("src/index.html")
    watcher.notify("src/blog/post.html")
    assert binding.pending
    release.set()

    assert watcher.wait_idle(5)
    assert binding.dispatches == 2
    assert len(calls) == 2


def test_failed_rebuild_is_logged_and_watching_continues(coordinator_factory, caplog) -> None:
    attempts = []

    def flaky(ctx) -> None:
        attempts.append(1)
        if len(attempts) == 1:
            raise BuildError("syntax error")

    graph = TaskGraph()
    graph.register("js", (), flaky)
    watcher = coordinator_factory(graph, {"src/**/*.js": ["js"]})

    watcher.notify("src/app.js")
    assert watcher.wait_idle(5)
    assert "Rebuild of 'js' failed" in caplog.text
    assert watcher.bindings[0].state == IDLE

    watcher.notify("src/app.js")
    assert watcher.wait_idle(5)
    assert len(attempts) == 2


def test_unmatched_paths_are_ignored(coordinator_factory, tmp_path: Path) -> None:
    counter = Counter()
    graph = TaskGraph()
    graph.register("assets", (), counter)
    watcher = coordinator_factory(graph, {"assets/**/*.png": ["assets"]})

    assert watcher.notify("assets/readme.txt") == []
    assert watcher.notify(tmp_path.resolve() / "assets/icons/a.png") == watcher.bindings
    assert watcher.wait_idle(5)
    assert counter.calls == 1


def test_binding_to_unknown_task_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="styles"):
        WatchCoordinator(TaskGraph(), {"src/**/*.scss": ["styles"]}, root=tmp_path)


def test_observer_triggers_rebuild(coordinator_factory, tmp_path: Path) -> None:
    counter = Counter()
    graph = TaskGraph()
    graph.register("html", (), counter)
    (tmp_path / "src").mkdir()
    watcher = coordinator_factory(graph, {"src/**/*.html": ["html"]}, debounce=0.01)
    watcher.start()

    (tmp_path / "src/index.html").write_text("<p>hi</p>", encoding="utf-8")

    deadline = time.monotonic() + 5
    while counter.calls == 0 and time.monotonic() < deadline:
        time.sleep(0.05)
    assert counter.calls >= 1
