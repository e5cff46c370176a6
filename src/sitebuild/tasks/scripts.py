"""JavaScript task: transpile with Babel (via dukpy), then minify with rjsmin."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Sequence

import dukpy
import rjsmin

from ..orchestrator import task
from ..orchestrator.core import RunContext
from ..orchestrator.errors import ConfigurationError, MinifyError, TranspileError
from ..orchestrator.streams import FileItem, Stage
from ..orchestrator.utils import as_list, task_option
from .copy import pipe

# The Babel 6 build bundled with dukpy has no `env` preset; `latest` covers the
# same ES2015-ES2017 transforms when no targets are given.
PRESET_ALIASES = {"env": "latest"}
DEFAULT_PRESETS = ["env"]

TRANSFORM_JS = (
    "var bres = Babel.transform(dukpy.source, dukpy.options);"
    "var res = {code: bres.code};"
)


@lru_cache(maxsize=1)
def babel_source() -> str:
    modules = Path(dukpy.__file__).parent / "jsmodules"
    found = sorted(modules.glob("babel-*.min.js"))
    if not found:
        raise ConfigurationError(f"No bundled Babel compiler found in {modules}")
    return found[-1].read_text(encoding="utf-8")


def babel_stage(presets: Sequence[str]) -> Stage:
    options = {"presets": [PRESET_ALIASES.get(p, p) for p in presets]}

    def transpile(item: FileItem) -> FileItem:
        try:
            source = item.contents.decode("utf-8")
            result = dukpy.evaljs((babel_source(), TRANSFORM_JS), source=source, options=options)
        except (UnicodeDecodeError, dukpy.JSRuntimeError) as e:
            raise TranspileError(item.path, str(e)) from e
        return FileItem(item.path, item.relative, result["code"].encode("utf-8"))

    return transpile


def minify_stage() -> Stage:
    def minify(item: FileItem) -> FileItem:
        try:
            code = rjsmin.jsmin(item.contents.decode("utf-8"))
        except Exception as e:  # noqa: BLE001
            raise MinifyError(item.path, str(e)) from e
        return FileItem(item.path, item.relative, code.encode("utf-8"))

    return minify


@task(name="js")
def js(ctx: RunContext):
    """Transpile and minify site scripts into the build root."""
    presets = as_list(task_option(ctx.params, "js", "presets", DEFAULT_PRESETS))
    pipe(ctx, "js", "src/**/*.js", "", [babel_stage(presets), minify_stage()])
