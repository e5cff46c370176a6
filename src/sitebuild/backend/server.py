"""Development server: static files from the build directory plus live reload.

HTML responses get a small client script that listens on ``/__livereload``
(server-sent events) and reloads the page whenever files under the build
directory change.
"""

from __future__ import annotations

import os
import re
import threading
import webbrowser
from pathlib import Path
from typing import Iterator, Optional

from flask import Flask, Response, abort, send_from_directory, stream_with_context
from flask_cors import CORS
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from werkzeug.serving import make_server
from werkzeug.utils import safe_join

from ..orchestrator.logging import get_logger

log = get_logger("sitebuild.server")

LIVERELOAD_PATH = "/__livereload"
LIVERELOAD_SNIPPET = """<script>
(function () {
  var source = new EventSource("%s");
  source.onmessage = function (event) {
    if (event.data === "reload") { window.location.reload(); }
  };
})();
</script>
""" % LIVERELOAD_PATH

BODY_CLOSE_RE = re.compile(r"</body\s*>", re.IGNORECASE)


def inject_livereload(html: str) -> str:
    matches = list(BODY_CLOSE_RE.finditer(html))
    if not matches:
        return html + LIVERELOAD_SNIPPET
    at = matches[-1].start()
    return html[:at] + LIVERELOAD_SNIPPET + html[at:]


class ReloadChannel:
    """Version counter that connected browsers wait on."""

    def __init__(self):
        self.version = 0
        self.closed = False
        self._cond = threading.Condition()

    def notify(self) -> None:
        with self._cond:
            self.version += 1
            self._cond.notify_all()

    def close(self) -> None:
        with self._cond:
            self.closed = True
            self._cond.notify_all()

    def wait(self, seen: int, timeout: float | None = None) -> int:
        with self._cond:
            self._cond.wait_for(lambda: self.version != seen or self.closed, timeout)
            return self.version

    def events(self, heartbeat: float = 15.0) -> Iterator[str]:
        seen = self.version
        yield "retry: 1000\n\n"
        while not self.closed:
            current = self.wait(seen, heartbeat)
            if self.closed:
                return
            if current != seen:
                seen = current
                yield "data: reload\n\n"
            else:
                yield ": ping\n\n"


def create_app(root: Path | str, channel: Optional[ReloadChannel] = None) -> Flask:
    root = Path(root).resolve()
    app = Flask(__name__, static_folder=None)
    CORS(app)

    @app.route(LIVERELOAD_PATH)
    def livereload():
        if channel is None:
            abort(404)
        return Response(
            stream_with_context(channel.events()),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    @app.route("/", defaults={"filename": ""})
    @app.route("/<path:filename>")
    def static_file(filename: str):
        target = safe_join(str(root), filename) if filename else str(root)
        if target is None:
            abort(404)
        if os.path.isdir(target):
            filename = f"{filename.rstrip('/')}/index.html".lstrip("/")
            target = os.path.join(target, "index.html")
        if not os.path.isfile(target):
            abort(404)
        if channel is not None and filename.endswith((".html", ".htm")):
            html = Path(target).read_bytes().decode("utf-8", errors="replace")
            return Response(inject_livereload(html), mimetype="text/html")
        return send_from_directory(root, filename, max_age=0)

    return app


class _ReloadHandler(FileSystemEventHandler):
    """Coalesces bursts of output writes into one reload."""

    def __init__(self, channel: ReloadChannel, delay: float = 0.2):
        self.channel = channel
        self.delay = delay
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return
        with self._lock:
            if self._timer is not None and self._timer.is_alive():
                return
            self._timer = threading.Timer(self.delay, self.channel.notify)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()


class DevServer:
    def __init__(
        self,
        root: Path | str,
        host: str = "localhost",
        port: int = 8000,
        livereload: bool = True,
        open_browser: bool = False,
    ):
        self.root = Path(root)
        self.host = host
        self.port = port
        self.livereload = livereload
        self.open_browser = open_browser
        self.channel: Optional[ReloadChannel] = None
        self._server = None
        self._thread: threading.Thread | None = None
        self._observer = None
        self._handler: _ReloadHandler | None = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"

    def start(self) -> "DevServer":
        self.root.mkdir(parents=True, exist_ok=True)
        if self.livereload:
            self.channel = ReloadChannel()
        app = create_app(self.root, self.channel)
        self._server = make_server(self.host, self.port, app, threaded=True)
        self.port = self._server.server_port
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="sitebuild-server", daemon=True
        )
        self._thread.start()
        if self.channel is not None:
            self._handler = _ReloadHandler(self.channel)
            self._observer = Observer()
            self._observer.schedule(self._handler, str(self.root), recursive=True)
            self._observer.start()
        log.info("Serving %s at %s (livereload=%s)", self.root, self.url, self.livereload)
        if self.open_browser:
            webbrowser.open(self.url)
        return self

    def stop(self) -> None:
        if self.channel is not None:
            self.channel.close()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        if self._handler is not None:
            self._handler.cancel()
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        log.info("Stopped server for %s", self.root)
