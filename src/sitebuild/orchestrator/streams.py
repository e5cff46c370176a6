"""File selections and transform pipelines shared by the copy/compile tasks.

A selection is a list of glob patterns relative to the project root, with the
same shape gulp accepts: ``**`` crosses directories, a leading ``!`` excludes.
Every matched file keeps its path relative to its pattern's base, the
directory part before the first glob segment, so ``src/**/*.html`` maps
``src/blog/index.html`` to ``blog/index.html`` under the destination.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, Iterator, Sequence

from .cache import write_if_changed
from .errors import SourceNotFoundError
from .logging import get_logger

logger = get_logger("sitebuild.streams")

GLOB_CHARS = "*?["


def is_glob(pattern: str) -> bool:
    return any(ch in pattern for ch in GLOB_CHARS)


def glob_base(pattern: str) -> str:
    """Directory prefix of ``pattern`` that holds no glob characters."""
    parts = PurePosixPath(pattern).parts
    base: list[str] = []
    for part in parts[:-1]:
        if is_glob(part):
            break
        base.append(part)
    return "/".join(base) or "."


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern:
    """Compile a ``**``-aware glob into a regex over posix relative paths."""
    i, n = 0, len(pattern)
    out = []
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    i += 1
                    out.append("(?:.*/)?")
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = pattern.find("]", i + 1)
            if j == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : j]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = j
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out) + r"\Z")


def match(pattern: str, path: str) -> bool:
    return glob_to_regex(_normalize(pattern)).match(_normalize(path)) is not None


def _normalize(p: str) -> str:
    p = p.replace(os.sep, "/")
    while p.startswith("./"):
        p = p[2:]
    return p


@dataclass(frozen=True)
class FileItem:
    path: Path
    relative: PurePosixPath
    contents: bytes

    def with_suffix(self, suffix: str) -> "FileItem":
        return replace(self, relative=self.relative.with_suffix(suffix))


Stage = Callable[[FileItem], FileItem]


class FileSelection:
    def __init__(self, patterns: Sequence[str] | str, root: Path | str = "."):
        if isinstance(patterns, str):
            patterns = [patterns]
        self.root = Path(root)
        self.include = [_normalize(p) for p in patterns if not p.startswith("!")]
        self.exclude = [_normalize(p[1:]) for p in patterns if p.startswith("!")]

    def __repr__(self) -> str:
        return f"FileSelection({self.include!r}, exclude={self.exclude!r})"

    def _excluded(self, rel: str) -> bool:
        return any(match(pat, rel) for pat in self.exclude)

    def __iter__(self) -> Iterator[tuple[Path, PurePosixPath]]:
        seen: set[str] = set()
        for pattern in self.include:
            for rel, base in self._expand(pattern):
                if rel in seen or self._excluded(rel):
                    continue
                seen.add(rel)
                relative = PurePosixPath(rel)
                if base != ".":
                    relative = relative.relative_to(base)
                yield self.root / rel, relative

    def _expand(self, pattern: str) -> Iterable[tuple[str, str]]:
        base = glob_base(pattern)
        if not is_glob(pattern):
            if not (self.root / pattern).is_file():
                raise SourceNotFoundError(pattern)
            return [(pattern, base)]
        regex = glob_to_regex(pattern)
        found: list[tuple[str, str]] = []
        for dirpath, dirnames, files in os.walk(self.root / base):
            dirnames.sort()
            for file in files:
                rel = _normalize(
                    os.path.relpath(os.path.join(dirpath, file), self.root)
                )
                if regex.match(rel):
                    found.append((rel, base))
        if not found:
            logger.warning("No files matched %s", pattern)
        return sorted(found)

    def files(self) -> list[Path]:
        return [path for path, _ in self]


def read(selection: FileSelection) -> list[FileItem]:
    return [
        FileItem(path=path, relative=rel, contents=path.read_bytes())
        for path, rel in selection
    ]


def stream(
    selection: FileSelection,
    stages: Sequence[Stage],
    dest: Path,
) -> list[Path]:
    """Push every selected file through ``stages`` and write the results under ``dest``.

    All files are transformed before anything is written, so a failing stage
    leaves no partial output behind. Returns the written (or already current)
    output paths in sorted order.
    """
    items = read(selection)
    for stage in stages:
        items = [stage(item) for item in items]
    outputs: list[Path] = []
    written = 0
    for item in sorted(items, key=lambda it: str(it.relative)):
        target = dest / item.relative
        if write_if_changed(target, item.contents):
            written += 1
        outputs.append(target)
    logger.debug("%d file(s) -> %s (%d changed)", len(outputs), dest, written)
    return outputs
