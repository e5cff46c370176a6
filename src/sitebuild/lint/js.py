"""Built-in checker for the eslint ruleset."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List

from .report import Violation
from .ruleset import Ruleset, SeverityRule


def _mask(text: str) -> str:
    """Blank out comments and string/template bodies, keeping columns."""
    out = list(text)
    state: str | None = None
    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if state is None:
            if text.startswith("//", i):
                state = "line"
                out[i] = out[i + 1] = " "
                i += 2
                continue
            if text.startswith("/*", i):
                state = "block"
                out[i] = out[i + 1] = " "
                i += 2
                continue
            if c in "\"'`":
                state = c
        elif state == "line":
            if c == "\n":
                state = None
            else:
                out[i] = " "
        elif state == "block":
            if text.startswith("*/", i):
                out[i] = out[i + 1] = " "
                state = None
                i += 2
                continue
            if c != "\n":
                out[i] = " "
        else:
            if c == "\\" and i + 1 < n:
                out[i] = "x"
                if text[i + 1] != "\n":
                    out[i + 1] = "x"
                i += 2
                continue
            if c == state or (c == "\n" and state != "`"):
                state = None
            elif c != "\n":
                out[i] = "x"
        i += 1
    return "".join(out)


class JsChecker:
    def __init__(self, ruleset: Ruleset):
        self.ruleset = ruleset

    def _rule(self, name: str) -> SeverityRule | None:
        rule = self.ruleset.get(name)
        if isinstance(rule, SeverityRule) and rule.level != "off":
            return rule
        return None

    def check_text(self, path: Path | str, text: str) -> List[Violation]:
        found: List[Violation] = []
        file = str(path)

        def add(rule: SeverityRule, line: int, col: int, message: str) -> None:
            found.append(Violation(file, line, col, rule.name, message, rule.level))

        raw_lines = text.split("\n")
        code_lines = _mask(text).split("\n")
        if len(raw_lines) > 1 and raw_lines[-1] == "":
            raw_lines, code_lines = raw_lines[:-1], code_lines[:-1]

        trailing = self._rule("no-trailing-spaces")
        tabs = self._rule("no-tabs")
        debugger = self._rule("no-debugger")
        eqeqeq = self._rule("eqeqeq")
        empty = self._rule("no-multiple-empty-lines")
        max_empty = int(empty.options.get("max", 2)) if empty else 0
        run = 0

        for no, (raw, code) in enumerate(zip(raw_lines, code_lines), start=1):
            if trailing:
                stripped = raw.rstrip(" \t\r")
                skip_blank = trailing.options.get("skipBlankLines", False)
                if len(stripped) != len(raw.rstrip("\r")) and not (skip_blank and not stripped):
                    add(trailing, no, len(stripped) + 1, "Trailing spaces not allowed.")
            if tabs and "\t" in raw:
                add(tabs, no, raw.index("\t") + 1, "Unexpected tab character.")
            if debugger:
                for m in re.finditer(r"\bdebugger\b", code):
                    add(debugger, no, m.start() + 1, "Unexpected 'debugger' statement.")
            if eqeqeq:
                for m in re.finditer(r"(?<![=!<>])(==|!=)(?!=)", code):
                    op = m.group(1)
                    rest = code[m.end() :].lstrip()
                    if eqeqeq.value == "smart" and rest.startswith(("null", "undefined")):
                        continue
                    if eqeqeq.options.get("null") == "ignore" and rest.startswith("null"):
                        continue
                    add(eqeqeq, no, m.start() + 1, f"Expected '{op}=' and instead saw '{op}'.")
            if empty:
                if raw.strip():
                    run = 0
                else:
                    run += 1
                    if run == max_empty + 1:
                        add(empty, no, 1, f"More than {max_empty} blank lines not allowed.")

        eol = self._rule("eol-last")
        if eol and text:
            has = text.endswith("\n")
            if (eol.value or "always") == "always" and not has:
                add(eol, len(raw_lines), len(raw_lines[-1]) + 1, "Newline required at end of file but not found.")
            elif eol.value == "never" and has:
                add(eol, len(raw_lines), 1, "Newline not allowed at end of file.")
        return sorted(found)

    def check_files(self, paths: Iterable[Path]) -> List[Violation]:
        found: List[Violation] = []
        for path in paths:
            found.extend(self.check_text(path, Path(path).read_text(encoding="utf-8")))
        return found
