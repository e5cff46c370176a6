from __future__ import annotations

import importlib
import pkgutil
import time
from pathlib import Path
from typing import Dict, Optional

import typer
from dotenv import load_dotenv

from .core import RunResult, TaskGraph, TaskSpec, build_graph, run
from .errors import ConfigurationError, TaskFailedError
from .logging import get_logger
from .utils import _get, load_config

load_dotenv()

app = typer.Typer(add_completion=False, help="Static site build orchestrator")
log = get_logger("sitebuild.cli")

EXIT_FAILED = 1
EXIT_CONFIG = 2


def discover_tasks(package: str = "sitebuild.tasks") -> Dict[str, TaskSpec]:
    """Import all modules in the tasks package and collect decorated functions."""
    pkg = importlib.import_module(package)
    specs: Dict[str, TaskSpec] = {}
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{package}."):
        mod = importlib.import_module(m.name)
        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            spec = getattr(obj, "_task_spec", None)
            if isinstance(spec, TaskSpec):
                if spec.name in specs and specs[spec.name].fn is not spec.fn:
                    raise ConfigurationError(
                        f"Task '{spec.name}' is declared twice ({m.name})"
                    )
                specs[spec.name] = spec
    return specs


def load_graph(package: str = "sitebuild.tasks") -> TaskGraph:
    specs = discover_tasks(package)
    return build_graph(specs[n] for n in sorted(specs))


def _load_params(config: str) -> dict:
    path = Path(config)
    if not path.exists():
        log.warning("Config %s not found; using built-in defaults", path)
        return {}
    params = load_config(path)
    log_file = _get(params, "logging", "file")
    if log_file:
        get_logger("sitebuild", Path(log_file))
    return params


def _hold(result: RunResult) -> None:
    """Keep background handles (server, watcher) alive until Ctrl+C."""
    typer.echo("Running; press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        log.info("Interrupted; stopping background tasks")
    finally:
        result.close()


@app.command("list")
def list_tasks():
    """List registered tasks."""
    try:
        graph = load_graph()
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=EXIT_CONFIG)
    typer.echo("Tasks:")
    for name in graph.names():
        spec = graph.tasks[name]
        line = f"- {name}"
        if spec.description:
            line += f": {spec.description}"
        if spec.prerequisites:
            joiner = " -> " if spec.series else ", "
            line += f" [{joiner.join(spec.prerequisites)}]"
        typer.echo(line)


@app.command("run")
def run_task(
    name: str = typer.Argument(..., help="Task name to run"),
    config: str = typer.Option(
        "configs/base.yaml", envvar="SITEBUILD_CONFIG", help="Path to YAML config"
    ),
    workers: Optional[int] = typer.Option(None, help="Maximum concurrent tasks"),
):
    """Run a task and everything it depends on."""
    try:
        graph = load_graph()
        params = _load_params(config)
        result = run(graph, name, params, max_workers=workers)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=EXIT_CONFIG)
    except TaskFailedError as e:
        typer.echo(str(e), err=True)
        code = EXIT_CONFIG if isinstance(e.error, ConfigurationError) else EXIT_FAILED
        raise typer.Exit(code=code)

    done = ", ".join(result.executed)
    typer.echo(f"Finished '{name}' ({done})")
    if result.background:
        _hold(result)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
