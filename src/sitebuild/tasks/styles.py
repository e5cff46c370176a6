"""Sass compilation: src/scss/main.scss -> build/css/main.css."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import sass

from ..orchestrator import task
from ..orchestrator.core import RunContext
from ..orchestrator.errors import CompileError
from ..orchestrator.streams import FileItem, Stage
from ..orchestrator.utils import as_list, project_root, task_option
from .copy import pipe

INCLUDE_PATHS = [
    "node_modules/bootstrap/scss/",
    "node_modules/font-awesome/fonts/",
    "src/scss",
]


def sass_stage(include_paths: Sequence[Path], output_style: str = "compressed") -> Stage:
    include = [str(p) for p in include_paths]

    def compile_scss(item: FileItem) -> FileItem:
        try:
            css = sass.compile(
                filename=str(item.path),
                include_paths=include,
                output_style=output_style,
            )
        except sass.CompileError as e:
            raise CompileError(item.path, str(e).strip()) from e
        return FileItem(
            path=item.path,
            relative=item.relative.with_suffix(".css"),
            contents=css.encode("utf-8"),
        )

    return compile_scss


@task(name="styles")
def styles(ctx: RunContext):
    """Compile the SCSS entry point to compressed CSS in build/css."""
    params = ctx.params
    root = project_root(params)
    include_paths = [
        root / p for p in as_list(task_option(params, "styles", "include_paths", INCLUDE_PATHS))
    ]
    output_style = task_option(params, "styles", "output_style", "compressed")
    pipe(
        ctx,
        "styles",
        "src/scss/main.scss",
        "css",
        [sass_stage(include_paths, output_style)],
    )
