"""Run stylelint / eslint from node_modules and collect their JSON reports."""

from __future__ import annotations

import json
import subprocess
import tempfile
from pathlib import Path
from typing import Any, List, Mapping, Sequence

from ..orchestrator.errors import BuildError
from .report import Violation

# exit codes that still mean "ran and produced a report"
STYLELINT_OK = (0, 2)
ESLINT_OK = (0, 1)


def run_command(cmd: Sequence[str], cwd: Path | None = None) -> subprocess.CompletedProcess:
    """Run a command and return the result; lint exit codes are not errors here."""
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise BuildError(f"Cannot run {cmd[0]}: {e}") from e


def _parse_json(
    engine: str, result: subprocess.CompletedProcess, ok_codes: Sequence[int]
) -> Any:
    """Decode the JSON report; any other exit code means the engine itself failed."""
    detail = (result.stderr or result.stdout or "").strip()
    if result.returncode not in ok_codes:
        raise BuildError(f"{engine} exited with code {result.returncode}: {detail}")
    # stylelint 16 writes the report to stderr
    report = (result.stdout or "").strip()
    if not report and (result.stderr or "").lstrip().startswith("["):
        report = result.stderr.strip()
    if not report:
        if result.returncode != 0:
            raise BuildError(f"{engine} reported problems but produced no report: {detail}")
        return []
    try:
        return json.loads(report)
    except json.JSONDecodeError as e:
        raise BuildError(f"{engine} did not produce a JSON report: {detail}") from e


def _write_config(data: Mapping[str, Any], suffix: str) -> Path:
    with tempfile.NamedTemporaryFile(
        "w", suffix=suffix, delete=False, encoding="utf-8"
    ) as f:
        json.dump(data, f, indent=2)
        return Path(f.name)


def stylelint(
    files: Sequence[Path],
    rules: Mapping[str, Any],
    root: Path,
    npx: str = "npx",
) -> List[Violation]:
    if not files:
        return []
    config = _write_config({"rules": dict(rules)}, ".stylelintrc.json")
    try:
        result = run_command(
            [
                npx,
                "stylelint",
                "--custom-syntax",
                "postcss-scss",
                "--config",
                str(config),
                "--formatter",
                "json",
                *[str(f) for f in files],
            ],
            cwd=root,
        )
    finally:
        config.unlink(missing_ok=True)
    found: List[Violation] = []
    for entry in _parse_json("stylelint", result, STYLELINT_OK):
        for w in entry.get("warnings", []):
            found.append(
                Violation(
                    file=entry.get("source", ""),
                    line=int(w.get("line", 0)),
                    column=int(w.get("column", 0)),
                    rule=w.get("rule", ""),
                    message=w.get("text", "").replace(f" ({w.get('rule')})", ""),
                    severity=w.get("severity", "error"),
                )
            )
    return found


def eslint(
    files: Sequence[Path],
    rules: Mapping[str, Any],
    root: Path,
    npx: str = "npx",
) -> List[Violation]:
    if not files:
        return []
    config = _write_config({"root": True, "rules": dict(rules)}, ".eslintrc.json")
    try:
        result = run_command(
            [
                npx,
                "eslint",
                "--no-eslintrc",
                "--config",
                str(config),
                "--format",
                "json",
                *[str(f) for f in files],
            ],
            cwd=root,
        )
    finally:
        config.unlink(missing_ok=True)
    found: List[Violation] = []
    for entry in _parse_json("eslint", result, ESLINT_OK):
        for m in entry.get("messages", []):
            found.append(
                Violation(
                    file=entry.get("filePath", ""),
                    line=int(m.get("line", 0)),
                    column=int(m.get("column", 0)),
                    rule=m.get("ruleId") or "",
                    message=m.get("message", ""),
                    severity="error" if m.get("severity") == 2 else "warning",
                )
            )
    return found
