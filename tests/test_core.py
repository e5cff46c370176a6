# tests/test_core.py

from __future__ import annotations

import threading
import time

import pytest

from sitebuild.orchestrator import (
    BuildError,
    ConfigurationError,
    TaskFailedError,
    TaskGraph,
    build_graph,
    run,
    task,
)


def recorder():
    calls: list[str] = []
    lock = threading.Lock()

    def make(name: str):
        def action(ctx) -> None:
            with lock:
                calls.append(name)

        return action

    return calls, make


def test_diamond_runs_each_task_once() -> None:
    calls, make = recorder()
    graph = TaskGraph()
    graph.register("d", (), make("d"))
    graph.register("b", ["d"], make("b"))
    graph.register("c", ["d"], make("c"))
    graph.register("a", ["b", "c"], make("a"))

    result = run(graph, "a")

    assert sorted(calls) == ["a", "b", "c", "d"]
    assert calls[0] == "d"
    assert calls[-1] == "a"
    assert result.ok
    assert set(result.executed) == {"a", "b", "c", "d"}


def test_cycle_is_rejected_at_registration() -> None:
    graph = TaskGraph()
    graph.register("a", ["b"])
    graph.register("c", ["a"])
    with pytest.raises(ConfigurationError, match="cycle"):
        graph.register("b", ["c"])
    assert "b" not in graph


def test_self_dependency_is_a_cycle() -> None:
    graph = TaskGraph()
    with pytest.raises(ConfigurationError):
        graph.register("x", ["x"])


def test_duplicate_name_is_rejected() -> None:
    graph = TaskGraph()
    graph.register("html")
    with pytest.raises(ConfigurationError, match="already registered"):
        graph.register("html")


def test_unresolved_prerequisite_fails_before_any_action() -> None:
    calls, make = recorder()
    graph = TaskGraph()
    graph.register("leaf", (), make("leaf"))
    graph.register("top", ["leaf", "missing"], make("top"))

    with pytest.raises(ConfigurationError, match="missing"):
        run(graph, "top")
    with pytest.raises(ConfigurationError):
        graph.validate()
    assert calls == []


def test_unknown_task_name() -> None:
    with pytest.raises(ConfigurationError, match="Unknown task"):
        run(TaskGraph(), "nope")


def test_failure_stops_new_tasks_but_lets_running_ones_finish() -> None:
    calls, make = recorder()
    slow_done = threading.Event()

    def slow(ctx) -> None:
        time.sleep(0.2)
        slow_done.set()

    def bad(ctx) -> None:
        raise BuildError("boom")

    graph = TaskGraph()
    graph.register("slow", (), slow)
    graph.register("bad", (), bad)
    graph.register("other", ["slow"], make("other"))
    graph.register("top", ["slow", "bad", "other"], make("top"))

    with pytest.raises(TaskFailedError) as exc:
        run(graph, "top")

    err = exc.value
    assert err.task == "bad"
    assert isinstance(err.__cause__, BuildError)
    assert slow_done.is_set()
    assert err.result.steps["slow"] == "ok"
    assert err.result.steps["bad"] == "error"
    assert err.result.steps["other"] == "skipped"
    assert err.result.steps["top"] == "skipped"
    assert calls == []


def test_unexpected_exception_is_wrapped() -> None:
    def broken(ctx) -> None:
        raise ValueError("bad value")

    graph = TaskGraph()
    graph.register("broken", (), broken)
    with pytest.raises(TaskFailedError) as exc:
        run(graph, "broken")
    assert isinstance(exc.value.error, ValueError)


def test_independent_tasks_run_concurrently() -> None:
    barrier = threading.Barrier(2, timeout=5)

    def meet(ctx) -> None:
        barrier.wait()

    graph = TaskGraph()
    graph.register("left", (), meet)
    graph.register("right", (), meet)
    graph.register("both", ["left", "right"])

    assert run(graph, "both").ok


def test_series_runs_prerequisites_in_order() -> None:
    calls, make = recorder()

    def slow_first(ctx) -> None:
        time.sleep(0.1)
        make("first")(ctx)

    graph = TaskGraph()
    graph.register("first", (), slow_first)
    graph.register("second-leaf", (), make("second-leaf"))
    graph.register("second", ["second-leaf"], make("second"))
    graph.register("all", ["first", "second"], make("all"), series=True)

    run(graph, "all")

    assert calls == ["first", "second-leaf", "second", "all"]


def test_series_failure_gates_later_stages() -> None:
    calls, make = recorder()

    def gate(ctx) -> None:
        raise BuildError("lint failed")

    graph = TaskGraph()
    graph.register("gate", (), gate)
    graph.register("out", (), make("out"))
    graph.register("start", ["gate", "out"], series=True)

    with pytest.raises(TaskFailedError):
        run(graph, "start")
    assert calls == []


def test_plan_adds_series_waits() -> None:
    graph = TaskGraph()
    graph.register("a")
    graph.register("b-leaf")
    graph.register("b", ["b-leaf"])
    graph.register("s", ["a", "b"], series=True)

    waits = graph.plan("s")

    assert waits["b-leaf"] == {"a"}
    assert waits["b"] == {"a", "b-leaf"}
    assert waits["a"] == set()


def test_task_decorator_and_build_graph() -> None:
    @task(name="one")
    def one(ctx):
        """First line.

        More detail.
        """

    @task(name="two", prerequisites=["one"], description="custom")
    def two(ctx):
        pass

    graph = build_graph([two._task_spec, one._task_spec])

    assert graph.names() == ["one", "two"]
    assert graph.tasks["one"].description == "First line."
    assert graph.tasks["two"].description == "custom"
    assert graph.tasks["two"].prerequisites == ("one",)


def test_params_reach_actions() -> None:
    seen = {}

    def action(ctx) -> None:
        seen.update(ctx.params)

    graph = TaskGraph()
    graph.register("t", (), action)
    run(graph, "t", {"project": {"root": "."}})
    assert seen == {"project": {"root": "."}}


def test_failed_run_stops_background_handles() -> None:
    stopped = []

    class Handle:
        def stop(self) -> None:
            stopped.append(True)

    def starts(ctx) -> None:
        ctx.add_background(Handle())

    def fails(ctx) -> None:
        time.sleep(0.05)
        raise BuildError("nope")

    graph = TaskGraph()
    graph.register("bg", (), starts)
    graph.register("bad", (), fails)
    graph.register("top", ["bg", "bad"])

    with pytest.raises(TaskFailedError):
        run(graph, "top")
    assert stopped == [True]
