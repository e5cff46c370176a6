"""Re-run tasks when their source files change.

Each binding ties a glob to the tasks that rebuild it and is either idle or
dispatching. A change seen while idle starts a dispatch; changes seen while a
dispatch is in progress only mark it pending, and a pending binding runs one
more time when the current dispatch ends. Failed re-runs are logged and the
binding goes back to idle.
"""

from __future__ import annotations

import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .core import TaskGraph, run
from .errors import BuildError, ConfigurationError
from .logging import get_logger
from .streams import glob_base, match

IDLE = "idle"
DISPATCHING = "dispatching"


class Binding:
    def __init__(self, pattern: str, tasks: Sequence[str]):
        self.pattern = pattern
        self.tasks = tuple(tasks)
        self.state = IDLE
        self.pending = False
        self.dispatches = 0
        self.lock = threading.Lock()
        self.idle = threading.Event()
        self.idle.set()

    def __repr__(self) -> str:
        return f"Binding({self.pattern!r} -> {', '.join(self.tasks)}, {self.state})"


class _Handler(FileSystemEventHandler):
    def __init__(self, coordinator: "WatchCoordinator"):
        self.coordinator = coordinator

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return
        self.coordinator.notify(event.src_path)
        dest = getattr(event, "dest_path", "")
        if dest:
            self.coordinator.notify(dest)


def _outermost(dirs: Iterable[Path]) -> list[Path]:
    kept: list[Path] = []
    for d in sorted(set(dirs), key=lambda p: len(p.parts)):
        if not any(d == k or k in d.parents for k in kept):
            kept.append(d)
    return kept


class WatchCoordinator:
    def __init__(
        self,
        graph: TaskGraph,
        bindings: Mapping[str, Sequence[str] | str],
        params: dict | None = None,
        root: Path | str = ".",
        debounce: float = 0.1,
    ):
        self.graph = graph
        self.params = dict(params or {})
        self.root = Path(root).resolve()
        self.debounce = debounce
        self.bindings: list[Binding] = []
        for pattern, tasks in bindings.items():
            tasks = [tasks] if isinstance(tasks, str) else list(tasks)
            for name in tasks:
                if name not in graph:
                    raise ConfigurationError(
                        f"Watch binding {pattern!r} refers to unknown task '{name}'"
                    )
            self.bindings.append(Binding(pattern, tasks))
        self.logger = get_logger("sitebuild.watch")
        self._pool = ThreadPoolExecutor(thread_name_prefix="sitebuild-watch")
        self._observer = None

    def start(self) -> "WatchCoordinator":
        observer = Observer()
        handler = _Handler(self)
        dirs = [self.root / glob_base(b.pattern) for b in self.bindings]
        for d in _outermost(dirs):
            if not d.is_dir():
                self.logger.warning("Not watching %s: directory does not exist", d)
                continue
            observer.schedule(handler, str(d), recursive=True)
            self.logger.info("Watching %s", d)
        observer.start()
        self._observer = observer
        return self

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        self._pool.shutdown(wait=True, cancel_futures=True)

    def _relative(self, path: str | os.PathLike) -> str:
        p = Path(os.fsdecode(path))
        if p.is_absolute():
            p = Path(os.path.relpath(p, self.root))
        return p.as_posix()

    def notify(self, path: str | os.PathLike) -> list[Binding]:
        """Handle a change to ``path``; returns the bindings it matched."""
        rel = self._relative(path)
        hits = [b for b in self.bindings if match(b.pattern, rel)]
        for binding in hits:
            self.logger.debug("Change %s matched %s", rel, binding.pattern)
            self._trigger(binding)
        return hits

    def _trigger(self, binding: Binding) -> None:
        with binding.lock:
            if binding.state == DISPATCHING:
                binding.pending = True
                return
            binding.state = DISPATCHING
            binding.idle.clear()
        self._pool.submit(self._dispatch, binding)

    def _dispatch(self, binding: Binding) -> None:
        while True:
            if self.debounce:
                time.sleep(self.debounce)
            with binding.lock:
                binding.pending = False
                binding.dispatches += 1
            for name in binding.tasks:
                try:
                    run(self.graph, name, self.params)
                except BuildError as e:
                    self.logger.error("Rebuild of '%s' failed: %s", name, e)
            with binding.lock:
                if not binding.pending:
                    binding.state = IDLE
                    binding.idle.set()
                    return

    def wait_idle(self, timeout: float | None = None) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        for binding in self.bindings:
            left = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not binding.idle.wait(left):
                return False
        return True
