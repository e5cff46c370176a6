"""Long-running development tasks: the file watcher and the live-reload server.

Both start a background handle and return at once; the handles live until the
run's context is closed.
"""

from __future__ import annotations

from ..backend.server import DevServer
from ..orchestrator import task
from ..orchestrator.core import RunContext
from ..orchestrator.utils import _get, build_dir, project_root
from ..orchestrator.watch import WatchCoordinator

WATCH_BINDINGS = {
    "src/scss/main.scss": ["styles"],
    "src/**/*.html": ["html"],
    "src/**/*.js": ["js"],
    "assets/**/*.png": ["assets"],
}


@task(name="watch")
def watch(ctx: RunContext):
    """Rebuild styles, HTML, scripts and assets when their sources change."""
    params = ctx.params
    bindings = _get(params, "watch", "bindings", default=WATCH_BINDINGS)
    debounce = float(_get(params, "watch", "debounce_ms", default=100)) / 1000
    coordinator = WatchCoordinator(
        ctx.graph,
        bindings,
        params,
        root=project_root(params),
        debounce=debounce,
    )
    ctx.add_background(coordinator.start())


@task(name="server")
def server(ctx: RunContext):
    """Serve the build directory with live reload."""
    params = ctx.params
    handle = DevServer(
        build_dir(params),
        host=_get(params, "server", "host", default="localhost"),
        port=int(_get(params, "server", "port", default=8000)),
        livereload=bool(_get(params, "server", "livereload", default=True)),
        open_browser=bool(_get(params, "server", "open", default=True)),
    )
    ctx.add_background(handle.start())
