"""Small helpers for reading paths and task options from config params."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def load_config(path: str | Path) -> dict:
    p = Path(path)
    with open(p, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def project_root(p: Dict) -> Path:
    return Path(_get(p, "project", "root", default="."))


def build_dir(p: Dict) -> Path:
    """Output directory, resolved against the project root."""
    return project_root(p) / _get(p, "project", "build_dir", default="build")


def task_option(p: Dict, task_name: str, key: str, default: Any = None) -> Any:
    return _get(p, "tasks", task_name, key, default=default)


def as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, Path)):
        return [str(value)]
    return [str(v) for v in value]
