# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from sitebuild.orchestrator.cli import load_graph
from sitebuild.orchestrator.core import TaskGraph

CLEAN_SCSS = ".alert {\n  color: #fff;\n}\n"
CLEAN_JS = "const greet = (name) => `hello ${name}`;\n"


def write(root: Path, rel: str, data: str | bytes) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        path.write_text(data, encoding="utf-8")
    return path


@pytest.fixture()
def site(tmp_path: Path) -> Path:
    """
    A small project tree with every source the build tasks read.

    Vendor packages are stand-in files; only their paths matter.
    """
    root = tmp_path / "site"
    write(root, "src/index.html", "<html><body><h1>Home</h1></body></html>\n")
    write(root, "src/blog/post.html", "<html><body><p>Post</p></body></html>\n")
    write(root, "src/scss/main.scss", CLEAN_SCSS)
    write(root, "src/scss/vendor/legacy.scss", "a {\n  color: red;\n}\n")
    write(root, "src/js/app.js", CLEAN_JS)
    write(root, "assets/logo.png", b"\x89PNG\r\n\x1a\nlogo")
    write(root, "assets/icons/star.png", b"\x89PNG\r\n\x1a\nstar")
    write(root, "node_modules/bootstrap/dist/js/bootstrap.bundle.min.js", "/* bootstrap */\n")
    write(root, "node_modules/bootstrap/scss/_variables.scss", "$primary: #007bff;\n")
    write(root, "node_modules/jquery/dist/jquery.min.js", "/* jquery */\n")
    write(root, "node_modules/font-awesome/fonts/fontawesome-webfont.woff", b"wOFF")
    write(root, "favicon.ico", b"\x00\x00\x01\x00")
    return root


@pytest.fixture()
def params(site: Path) -> dict:
    return {
        "project": {"root": str(site), "build_dir": "build"},
        "server": {"host": "127.0.0.1", "port": 0, "open": False},
        "watch": {"debounce_ms": 10},
    }


@pytest.fixture()
def graph() -> TaskGraph:
    return load_graph()


@pytest.fixture()
def fake_npx(tmp_path: Path):
    """
    Write an executable stand-in for ``npx`` that prints a canned report.

    Returns ``make(stdout, stderr="", code=0) -> Path``; each call records its
    arguments one per line in ``args.txt`` next to the script.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def make(stdout: str, stderr: str = "", code: int = 0) -> Path:
        (bin_dir / "out.txt").write_text(stdout, encoding="utf-8")
        (bin_dir / "err.txt").write_text(stderr, encoding="utf-8")
        script = bin_dir / "npx"
        script.write_text(
            "#!/bin/sh\n"
            f'printf "%s\\n" "$@" > "{bin_dir}/args.txt"\n'
            f'cat "{bin_dir}/out.txt"\n'
            f'cat "{bin_dir}/err.txt" >&2\n'
            f"exit {code}\n",
            encoding="utf-8",
        )
        script.chmod(0o755)
        return script

    return make
