# tests/test_scripts.py

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from sitebuild.orchestrator import TaskFailedError, run
from sitebuild.orchestrator.errors import TranspileError
from sitebuild.orchestrator.streams import FileItem
from sitebuild.tasks.scripts import DEFAULT_PRESETS, babel_source, babel_stage, minify_stage


def item(source: str) -> FileItem:
    return FileItem(Path("app.js"), PurePosixPath("app.js"), source.encode("utf-8"))


def test_babel_transpiles_arrow_functions() -> None:
    out = babel_stage(["es2015"])(item("const twice = (x) => x * 2;\n"))
    code = out.contents.decode("utf-8")
    assert "=>" not in code
    assert "function" in code
    assert "var twice" in code


def test_minify_strips_comments_and_whitespace() -> None:
    source = "/* header */\nvar  a = 1;\n\n\nvar b = 2;\n"
    out = minify_stage()(item(source)).contents.decode("utf-8")
    assert "header" not in out
    assert len(out) < len(source)


def test_syntax_error_names_the_file() -> None:
    with pytest.raises(TranspileError, match="app.js"):
        babel_stage(["es2015"])(item("const = ;\n"))


def test_js_task_writes_minified_es5(graph, site: Path, params: dict) -> None:
    run(graph, "js", params)
    code = (site / "build/js/app.js").read_text(encoding="utf-8")
    assert "=>" not in code
    assert "`" not in code
    assert "hello " in code


def test_js_task_failure_writes_nothing(graph, site: Path, params: dict) -> None:
    (site / "src/js/broken.js").write_text("function (\n", encoding="utf-8")
    with pytest.raises(TaskFailedError) as exc:
        run(graph, "js", params)
    assert isinstance(exc.value.error, TranspileError)
    assert not (site / "build/js/app.js").exists()


def test_bundled_babel_is_found() -> None:
    assert "Babel" in babel_source()


def test_default_env_preset_transpiles() -> None:
    assert DEFAULT_PRESETS == ["env"]
    out = babel_stage(DEFAULT_PRESETS)(item("let [a, b] = [1, 2];\nconst f = (x) => x ** 2;\n"))
    code = out.contents.decode("utf-8")
    assert "=>" not in code
    assert "**" not in code
    assert "let " not in code


def test_unknown_preset_is_a_transpile_error() -> None:
    with pytest.raises(TranspileError, match="app.js"):
        babel_stage(["no-such-preset"])(item("var a = 1;\n"))
