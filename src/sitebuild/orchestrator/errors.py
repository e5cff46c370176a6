"""Exception types raised by the task graph, the runner and the task actions."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from ..lint.report import Violation
    from .core import RunResult


class BuildError(Exception):
    """Base exception for everything sitebuild raises on purpose."""


class ConfigurationError(BuildError):
    """Bad task graph or bad configuration. Detected before any action runs."""


class SourceNotFoundError(BuildError):
    def __init__(self, pattern: str):
        super().__init__(f"File not found with singular glob: {pattern}")
        self.pattern = pattern


class _FileError(BuildError):
    stage = "process"

    def __init__(self, path: Path | str, message: str):
        super().__init__(f"Failed to {self.stage} {path}: {message}")
        self.path = Path(path)
        self.detail = message


class CompileError(_FileError):
    stage = "compile"


class TranspileError(_FileError):
    stage = "transpile"


class MinifyError(_FileError):
    stage = "minify"


class LintError(BuildError):
    def __init__(self, linter: str, violations: Sequence["Violation"]):
        files = len({v.file for v in violations})
        super().__init__(
            f"{linter}: {len(violations)} violation(s) in {files} file(s)"
        )
        self.linter = linter
        self.violations = list(violations)


class TaskFailedError(BuildError):
    """Raised by ``run`` when a task action fails. ``__cause__`` is the original error."""

    def __init__(self, task: str, error: BaseException, result: "RunResult"):
        super().__init__(f"Task '{task}' failed: {error}")
        self.task = task
        self.error = error
        self.result = result
