"""Task graph, runner and the file streaming helpers the site tasks are built on."""

from .core import RunContext, RunResult, TaskGraph, TaskSpec, build_graph, run, task
from .errors import BuildError, ConfigurationError, TaskFailedError

__all__ = [
    "BuildError",
    "ConfigurationError",
    "RunContext",
    "RunResult",
    "TaskFailedError",
    "TaskGraph",
    "TaskSpec",
    "build_graph",
    "run",
    "task",
]
