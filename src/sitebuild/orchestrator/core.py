from __future__ import annotations

import inspect
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Protocol

from .errors import BuildError, ConfigurationError, TaskFailedError
from .logging import get_logger


class Background(Protocol):
    """Long-lived handle started by a task (server, file watcher)."""

    def stop(self) -> None: ...


Action = Callable[["RunContext"], None]


@dataclass
class TaskSpec:
    name: str
    prerequisites: tuple[str, ...] = ()
    fn: Optional[Action] = None
    series: bool = False
    description: str = ""


def task(
    name: str,
    prerequisites: Iterable[str] = (),
    series: bool = False,
    description: str | None = None,
):
    """Decorator to declare a task on a function.

    The wrapped function receives a single ``RunContext``. With ``series=True``
    the prerequisites run one after another in the listed order instead of
    concurrently. The description defaults to the first docstring line.
    """

    def deco(fn: Action):
        doc = description
        if doc is None:
            doc = (inspect.getdoc(fn) or "").split("\n", 1)[0]
        spec = TaskSpec(
            name=name,
            prerequisites=tuple(prerequisites),
            fn=fn,
            series=series,
            description=doc,
        )
        setattr(fn, "_task_spec", spec)
        return fn

    return deco


def topo_sort(nodes: Iterable[str], edges: Iterable[tuple[str, str]]) -> list[str]:
    nodes = list(nodes)
    incoming = {n: set() for n in nodes}
    outgoing = {n: set() for n in nodes}
    for u, v in edges:
        if u not in incoming or v not in incoming:
            raise ConfigurationError(f"Edge references unknown node: {(u, v)}")
        outgoing[u].add(v)
        incoming[v].add(u)
    ordered: list[str] = []
    roots = sorted((n for n in nodes if not incoming[n]), reverse=True)
    while roots:
        n = roots.pop()
        ordered.append(n)
        for m in sorted(outgoing[n]):
            incoming[m].discard(n)
            outgoing[n].discard(m)
            if not incoming[m]:
                roots.append(m)
    stuck = sorted(n for n in nodes if incoming[n])
    if stuck:
        raise ConfigurationError(f"Cycle detected between tasks: {', '.join(stuck)}")
    return ordered


class TaskGraph:
    """Task name -> (prerequisites, action). Built once at startup, then read-only."""

    def __init__(self, name: str = "site"):
        self.name = name
        self.tasks: dict[str, TaskSpec] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.tasks

    def __len__(self) -> int:
        return len(self.tasks)

    def names(self) -> list[str]:
        return sorted(self.tasks)

    def register(
        self,
        name: str,
        prerequisites: Iterable[str] = (),
        fn: Optional[Action] = None,
        *,
        series: bool = False,
        description: str = "",
    ) -> TaskSpec:
        if name in self.tasks:
            raise ConfigurationError(f"Task '{name}' is already registered")
        prerequisites = tuple(prerequisites)
        # Prerequisites may be registered later; only already-known edges can close a cycle.
        for prereq in prerequisites:
            path = self._find_path(prereq, name)
            if path is not None:
                raise ConfigurationError(
                    "Registering '%s' would create a cycle: %s"
                    % (name, " -> ".join([name, *path]))
                )
        spec = TaskSpec(
            name=name,
            prerequisites=prerequisites,
            fn=fn,
            series=series,
            description=description,
        )
        self.tasks[name] = spec
        return spec

    def add(self, spec: TaskSpec) -> TaskSpec:
        return self.register(
            spec.name,
            spec.prerequisites,
            spec.fn,
            series=spec.series,
            description=spec.description,
        )

    def _find_path(self, start: str, target: str) -> list[str] | None:
        stack = [(start, [start])]
        seen: set[str] = set()
        while stack:
            node, path = stack.pop()
            if node == target:
                return path
            if node in seen:
                continue
            seen.add(node)
            spec = self.tasks.get(node)
            if spec is None:
                continue
            for p in spec.prerequisites:
                stack.append((p, path + [p]))
        return None

    def closure(self, name: str) -> list[str]:
        """``name`` and everything it transitively depends on."""
        if name not in self.tasks:
            raise ConfigurationError(f"Unknown task: {name}")
        seen: list[str] = []
        stack = [name]
        while stack:
            node = stack.pop()
            if node in seen:
                continue
            spec = self.tasks.get(node)
            if spec is None:
                raise ConfigurationError(f"Task '{node}' is not registered")
            seen.append(node)
            for p in spec.prerequisites:
                if p not in self.tasks:
                    raise ConfigurationError(
                        f"Task '{node}' depends on unregistered task '{p}'"
                    )
                stack.append(p)
        return seen

    def plan(self, name: str) -> dict[str, set[str]]:
        """Map every task reachable from ``name`` to the tasks it must wait for.

        Besides declared prerequisites, a series task makes each task in the
        closure of its i-th prerequisite wait for all earlier prerequisites.
        """
        nodes = self.closure(name)
        waits = {n: set(self.tasks[n].prerequisites) for n in nodes}
        for node in nodes:
            spec = self.tasks[node]
            if not spec.series:
                continue
            covered: set[str] = set()
            for i, prereq in enumerate(spec.prerequisites):
                stage = set(self.closure(prereq))
                for member in stage - covered:
                    waits[member].update(
                        p for p in spec.prerequisites[:i] if p != member
                    )
                covered |= stage
        topo_sort(waits, [(d, n) for n, ds in waits.items() for d in ds])
        return waits

    def validate(self, name: str | None = None) -> None:
        for n in [name] if name else self.names():
            self.plan(n)


class RunContext:
    """Handed to every action of one run."""

    def __init__(self, graph: TaskGraph, params: dict, run_id: str):
        self.graph = graph
        self.params = params
        self.run_id = run_id
        self.background: list[Background] = []
        self._lock = threading.Lock()

    def logger(self, task_name: str):
        return get_logger(f"sitebuild.{self.graph.name}.{task_name}")

    def add_background(self, handle: Background) -> None:
        with self._lock:
            self.background.append(handle)

    def close(self) -> None:
        log = get_logger("sitebuild.run")
        with self._lock:
            handles, self.background = self.background[::-1], []
        for handle in handles:
            try:
                handle.stop()
            except Exception:  # noqa: BLE001
                log.exception("Failed to stop %r", handle)


@dataclass
class RunResult:
    name: str
    run_id: str
    steps: dict[str, str]
    errors: dict[str, BaseException] = field(default_factory=dict)
    durations: dict[str, float] = field(default_factory=dict)
    context: Optional[RunContext] = None

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def executed(self) -> list[str]:
        return [n for n, s in self.steps.items() if s in ("ok", "error")]

    @property
    def background(self) -> list[Background]:
        return list(self.context.background) if self.context else []

    def close(self) -> None:
        if self.context is not None:
            self.context.close()


def _execute(spec: TaskSpec, ctx: RunContext) -> float:
    step_logger = ctx.logger(spec.name)
    started = time.perf_counter()
    step_logger.info("Run: %s", spec.name)
    try:
        if spec.fn is not None:
            spec.fn(ctx)
    except BuildError as e:
        step_logger.error("Step failed (%s): %s", spec.name, e)
        raise
    except Exception:
        step_logger.exception("Step failed (%s)", spec.name)
        raise
    elapsed = time.perf_counter() - started
    step_logger.info("Done: %s (%.2fs)", spec.name, elapsed)
    return elapsed


def run(
    graph: TaskGraph,
    name: str,
    params: dict | None = None,
    *,
    max_workers: int | None = None,
) -> RunResult:
    """Run ``name`` and its prerequisite closure.

    Each task runs at most once. Independent tasks run concurrently on a thread
    pool. After the first failure no new task is started; tasks already running
    are allowed to finish and their outcome is recorded in the result carried
    by ``TaskFailedError``. Background handles started by a failed run are
    stopped before the error is raised.
    """
    waits = graph.plan(name)
    order = topo_sort(waits, [(d, n) for n, ds in waits.items() for d in ds])

    run_id = time.strftime("%Y%m%d-%H%M%S")
    ctx = RunContext(graph, dict(params or {}), run_id)
    result = RunResult(
        name=name, run_id=run_id, steps={n: "pending" for n in order}, context=ctx
    )
    log = get_logger("sitebuild.run")
    log.info("Selected steps: %s", " → ".join(order))

    remaining = {n: set(ds) for n, ds in waits.items()}
    running: dict[Future, str] = {}
    failed: str | None = None

    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="sitebuild"
    ) as executor:

        def submit_ready() -> None:
            for n in order:
                if result.steps[n] == "pending" and not remaining[n]:
                    result.steps[n] = "running"
                    running[executor.submit(_execute, graph.tasks[n], ctx)] = n

        submit_ready()
        while running:
            done, _ = wait(running, return_when=FIRST_COMPLETED)
            for fut in done:
                n = running.pop(fut)
                err = fut.exception()
                if err is None:
                    result.steps[n] = "ok"
                    result.durations[n] = fut.result()
                    for deps in remaining.values():
                        deps.discard(n)
                else:
                    result.steps[n] = "error"
                    result.errors[n] = err
                    if failed is None:
                        failed = n
            if failed is None:
                submit_ready()

    for n, status in result.steps.items():
        if status == "pending":
            result.steps[n] = "skipped"

    if failed is not None:
        skipped = [n for n, s in result.steps.items() if s == "skipped"]
        if skipped:
            log.warning("Not started after failure: %s", ", ".join(skipped))
        ctx.close()
        error = result.errors[failed]
        raise TaskFailedError(failed, error, result) from error
    return result


def build_graph(specs: Iterable[TaskSpec], name: str = "site") -> TaskGraph:
    graph = TaskGraph(name=name)
    for spec in specs:
        graph.add(spec)
    graph.validate()
    return graph
