"""Copy tasks: HTML pages, vendor scripts, images, fonts and the favicon.

Each task streams a file selection into a directory under the build output
with no transform. Sources and destinations can be overridden per task under
``tasks.<name>.src`` / ``tasks.<name>.dest`` in the config.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..orchestrator import task
from ..orchestrator.core import RunContext
from ..orchestrator.streams import FileSelection, Stage, stream
from ..orchestrator.utils import as_list, build_dir, project_root, task_option


def pipe(
    ctx: RunContext,
    name: str,
    src: Sequence[str] | str,
    dest: str,
    stages: Sequence[Stage] = (),
) -> list[Path]:
    """Stream ``name``'s sources through ``stages`` into ``build/<dest>``."""
    params = ctx.params
    patterns = as_list(task_option(params, name, "src", default=src))
    target = build_dir(params) / task_option(params, name, "dest", default=dest)
    selection = FileSelection(patterns, root=project_root(params))
    outputs = stream(selection, stages, target)
    ctx.logger(name).info("%d file(s) -> %s", len(outputs), target)
    return outputs


@task(name="html")
def html(ctx: RunContext):
    """Copy HTML pages to the build root."""
    pipe(ctx, "html", "src/**/*.html", "")


@task(name="bootstrap-js")
def bootstrap_js(ctx: RunContext):
    """Copy the Bootstrap JS bundle to build/js."""
    pipe(ctx, "bootstrap-js", "node_modules/bootstrap/dist/js/bootstrap.bundle.min.js", "js")


@task(name="jquery")
def jquery(ctx: RunContext):
    """Copy minified jQuery to build/js."""
    pipe(ctx, "jquery", "node_modules/jquery/dist/jquery.min.js", "js")


@task(name="assets")
def assets(ctx: RunContext):
    """Copy PNG assets to build/assets."""
    pipe(ctx, "assets", "assets/**/*.png", "assets")


@task(name="font-awesome")
def font_awesome(ctx: RunContext):
    """Copy Font Awesome fonts to build/fonts."""
    pipe(ctx, "font-awesome", "node_modules/font-awesome/fonts/*", "fonts")


@task(name="favicon")
def favicon(ctx: RunContext):
    """Copy the favicon to the build root."""
    pipe(ctx, "favicon", "favicon.ico", "")
