"""Entry-point tasks.

``start`` runs lint, then the build, then the server and watcher, each stage
only after the previous one succeeded. ``deploy`` builds the assets and does
nothing else.
"""

from __future__ import annotations

from ..orchestrator import task
from ..orchestrator.core import RunContext
from ..orchestrator.utils import build_dir

LINT_TASKS = ("scss-lint", "js-lint")
BUILD_TASKS = (
    "html",
    "styles",
    "js",
    "bootstrap-js",
    "jquery",
    "assets",
    "font-awesome",
    "favicon",
)


@task(name="lint", prerequisites=LINT_TASKS)
def lint(ctx: RunContext):
    """Run both linters."""
    ctx.logger("lint").info("Sources are lint-clean")


@task(name="build", prerequisites=BUILD_TASKS)
def build(ctx: RunContext):
    """Copy and compile every asset."""
    ctx.logger("build").info("Build output ready in %s", build_dir(ctx.params))


@task(name="serve", prerequisites=("server", "watch"))
def serve(ctx: RunContext):
    """Start the dev server and the watcher."""


@task(name="start", prerequisites=("lint", "build", "serve"), series=True)
def start(ctx: RunContext):
    """Lint, build, then serve with live reload and rebuild on change."""
    ctx.logger("start").info("Development pipeline running; press Ctrl+C to stop")


@task(name="deploy", prerequisites=BUILD_TASKS)
def deploy(ctx: RunContext):
    """Build production assets (no lint, no server, no watcher)."""
    ctx.logger("deploy").info("Deploy assets ready in %s", build_dir(ctx.params))
