from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..orchestrator.errors import LintError


@dataclass(frozen=True, order=True)
class Violation:
    file: str
    line: int
    column: int
    rule: str
    message: str
    severity: str = "error"

    def format(self) -> str:
        return f"{self.file}:{self.line}:{self.column}  {self.message}  ({self.rule})"


def report(linter: str, violations: Sequence[Violation], logger: logging.Logger) -> None:
    """Log every violation, then fail if any of them is an error.

    Warnings are logged but never fail the task.
    """
    ordered = sorted(violations)
    for v in ordered:
        if v.severity == "error":
            logger.error(v.format())
        else:
            logger.warning(v.format())
    errors = [v for v in ordered if v.severity == "error"]
    if errors:
        raise LintError(linter, errors)
    logger.info("%s: no violations", linter)
