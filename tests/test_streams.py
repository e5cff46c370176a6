# tests/test_streams.py

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from sitebuild.orchestrator.cache import write_if_changed
from sitebuild.orchestrator.errors import BuildError, SourceNotFoundError
from sitebuild.orchestrator.streams import (
    FileItem,
    FileSelection,
    glob_base,
    match,
    stream,
)


def test_glob_base() -> None:
    assert glob_base("src/**/*.html") == "src"
    assert glob_base("src/scss/main.scss") == "src/scss"
    assert glob_base("node_modules/font-awesome/fonts/*") == "node_modules/font-awesome/fonts"
    assert glob_base("favicon.ico") == "."
    assert glob_base("*.txt") == "."


def test_match_double_star() -> None:
    assert match("src/**/*.html", "src/index.html")
    assert match("src/**/*.html", "src/a/b/page.html")
    assert not match("src/**/*.html", "srcx/index.html")
    assert not match("src/*.js", "src/lib/app.js")
    assert match("assets/**/*.png", "./assets/logo.png")
    assert match("src/[!_]*.scss", "src/main.scss")
    assert not match("src/[!_]*.scss", "src/_partial.scss")


def test_selection_keeps_structure_relative_to_base(site: Path) -> None:
    pairs = list(FileSelection("src/**/*.html", root=site))
    relatives = [str(rel) for _, rel in pairs]
    assert relatives == ["blog/post.html", "index.html"]
    assert pairs[1][0] == site / "src/index.html"


def test_selection_negation_excludes(site: Path) -> None:
    selection = FileSelection(
        ["src/scss/**/*.scss", "!src/scss/vendor/**/*.scss"], root=site
    )
    assert selection.files() == [site / "src/scss/main.scss"]


def test_literal_source_must_exist(tmp_path: Path) -> None:
    with pytest.raises(SourceNotFoundError, match="favicon.ico"):
        FileSelection("favicon.ico", root=tmp_path).files()


def test_empty_glob_only_warns(tmp_path: Path, caplog) -> None:
    assert FileSelection("assets/**/*.png", root=tmp_path).files() == []
    assert "No files matched" in caplog.text


def test_literal_source_keeps_file_name(site: Path) -> None:
    pairs = list(FileSelection("node_modules/jquery/dist/jquery.min.js", root=site))
    assert [rel for _, rel in pairs] == [PurePosixPath("jquery.min.js")]


def test_stream_applies_stages_in_order(site: Path, tmp_path: Path) -> None:
    def upper(item: FileItem) -> FileItem:
        return FileItem(item.path, item.relative, item.contents.upper())

    def rename(item: FileItem) -> FileItem:
        return item.with_suffix(".htm")

    dest = tmp_path / "out"
    outputs = stream(FileSelection("src/**/*.html", root=site), [upper, rename], dest)

    assert outputs == [dest / "blog/post.htm", dest / "index.htm"]
    assert (dest / "index.htm").read_bytes().startswith(b"<HTML>")


def test_failing_stage_writes_nothing(site: Path, tmp_path: Path) -> None:
    def fail_on_post(item: FileItem) -> FileItem:
        if item.relative.name == "post.html":
            raise BuildError("bad file")
        return item

    dest = tmp_path / "out"
    with pytest.raises(BuildError):
        stream(FileSelection("src/**/*.html", root=site), [fail_on_post], dest)
    assert not dest.exists()


def test_write_if_changed_skips_identical_bytes(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b.txt"
    assert write_if_changed(target, b"one") is True
    assert write_if_changed(target, b"one") is False
    assert write_if_changed(target, b"two") is True
    assert target.read_bytes() == b"two"
