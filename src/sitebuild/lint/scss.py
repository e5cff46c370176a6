"""Built-in SCSS checker for the stylelint ruleset.

Works line by line on a masked copy of the source: comments are blanked,
string bodies and ``#{}`` interpolations are replaced by filler of the same
length, so every column in the masked text is a column in the file. Each line
is classified (selector, declaration, at-rule, closing brace, ...) before the
rule checks run. Rules with no checker here are only enforced by the
stylelint engine.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Tuple

from .report import Violation
from .ruleset import (
    KeywordRule,
    LimitRule,
    PatternRule,
    Rule,
    Ruleset,
    SwitchRule,
    UnitAllowListRule,
)

NAMED_COLORS = frozenset(
    """
    aliceblue antiquewhite aqua aquamarine azure beige bisque black
    blanchedalmond blue blueviolet brown burlywood cadetblue chartreuse
    chocolate coral cornflowerblue cornsilk crimson cyan darkblue darkcyan
    darkgoldenrod darkgray darkgreen darkgrey darkkhaki darkmagenta
    darkolivegreen darkorange darkorchid darkred darksalmon darkseagreen
    darkslateblue darkslategray darkslategrey darkturquoise darkviolet
    deeppink deepskyblue dimgray dimgrey dodgerblue firebrick floralwhite
    forestgreen fuchsia gainsboro ghostwhite gold goldenrod gray green
    greenyellow grey honeydew hotpink indianred indigo ivory khaki lavender
    lavenderblush lawngreen lemonchiffon lightblue lightcoral lightcyan
    lightgoldenrodyellow lightgray lightgreen lightgrey lightpink
    lightsalmon lightseagreen lightskyblue lightslategray lightslategrey
    lightsteelblue lightyellow lime limegreen linen magenta maroon
    mediumaquamarine mediumblue mediumorchid mediumpurple mediumseagreen
    mediumslateblue mediumspringgreen mediumturquoise mediumvioletred
    midnightblue mintcream mistyrose moccasin navajowhite navy oldlace olive
    olivedrab orange orangered orchid palegoldenrod palegreen paleturquoise
    palevioletred papayawhip peachpuff peru pink plum powderblue purple
    rebeccapurple red rosybrown royalblue saddlebrown salmon sandybrown
    seagreen seashell sienna silver skyblue slateblue slategray slategrey
    snow springgreen steelblue tan teal thistle tomato turquoise violet
    wheat white whitesmoke yellow yellowgreen
    """.split()
)

KNOWN_AT_RULES = frozenset(
    """
    annotation apply character-variant charset container counter-style
    custom-media custom-selector document font-face font-feature-values
    font-palette-values import keyframes layer media namespace nest
    ornaments page property styleset stylistic supports swash viewport
    """.split()
)

LENGTH_UNITS = ("px", "em", "rem", "ex", "ch", "vw", "vh", "vmin", "vmax", "cm", "mm", "in", "pt", "pc", "q")
UNITS = frozenset(LENGTH_UNITS + ("deg", "grad", "rad", "turn", "s", "ms", "hz", "khz", "dpi", "dpcm", "dppx", "fr", "x"))
PSEUDO_ELEMENTS = frozenset(("before", "after", "first-line", "first-letter", "selection", "placeholder", "marker", "backdrop"))
GENERIC_FONTS = frozenset(("serif", "sans-serif", "cursive", "fantasy", "monospace", "system-ui", "inherit", "initial", "unset"))

DECL_RE = re.compile(r"^(?P<prop>\$?-?[A-Za-z_][\w-]*)(?P<before>\s*):(?P<value>.*)$")
INTERPOLATION_RE = re.compile(r"#\{[^{}]*\}")
HEX_RE = re.compile(r"#([0-9a-fA-F]{3,8})\b")
NUMBER_UNIT_RE = re.compile(r"(?<![\w.#$-])(\d*\.?\d+)([a-zA-Z]+)\b")


@dataclass
class Line:
    no: int
    raw: str
    code: str
    depth: int
    kind: str = "blank"
    prop: str = ""
    prop_col: int = 0
    value: str = ""
    value_col: int = 0
    single_line: bool = True
    comment: bool = False
    comment_start: bool = False

    @property
    def text(self) -> str:
        return self.code.strip()

    @property
    def indent(self) -> int:
        return len(self.code) - len(self.code.lstrip())


@dataclass
class StringLiteral:
    line: int
    col: int
    quote: str
    body: str


class ScssSource:
    def __init__(self, path: Path | str, text: str):
        self.path = str(path)
        self.text = text
        masked, comment_lines, comment_starts, self.strings = _mask(text)
        raw_lines = text.split("\n")
        code_lines = masked.split("\n")
        if raw_lines and raw_lines[-1] == "" and len(raw_lines) > 1:
            raw_lines, code_lines = raw_lines[:-1], code_lines[:-1]
        self.lines: List[Line] = []
        depth = 0
        pending = False
        for i, (raw, code) in enumerate(zip(raw_lines, code_lines)):
            code = INTERPOLATION_RE.sub(lambda m: "x" * len(m.group()), code)
            line = Line(
                no=i + 1,
                raw=raw,
                code=code,
                depth=depth,
                comment=(i + 1) in comment_lines,
                comment_start=(i + 1) in comment_starts,
            )
            s = line.text
            if not s:
                line.kind = "blank"
            elif s.startswith("}"):
                line.kind = "close"
                pending = False
            elif pending:
                line.kind = "continuation"
                line.value, line.value_col = code, 0
            elif s.startswith("@"):
                line.kind = "at-rule"
            elif s.endswith("{"):
                line.kind = "selector"
            else:
                m = DECL_RE.match(s)
                if m and not (s.endswith(",") and not m.group("value")[:1].isspace()):
                    line.kind = "declaration"
                    line.prop = m.group("prop")
                    line.prop_col = line.indent
                    line.value = m.group("value")
                    line.value_col = line.indent + m.start("value")
                elif s.endswith(","):
                    line.kind = "selector"
                else:
                    line.kind = "other"
            if line.kind in ("declaration", "continuation"):
                pending = not s.endswith((";", "{", "}"))
            depth += code.count("{") - code.count("}")
            self.lines.append(line)
        for prev, nxt in zip(self.lines, self.lines[1:]):
            if prev.kind == "declaration" and nxt.kind == "continuation":
                prev.single_line = False

    def previous(self, line: Line, skip_blank: bool = True) -> Line | None:
        for cand in reversed(self.lines[: line.no - 1]):
            if skip_blank and not cand.text and not cand.comment:
                continue
            return cand
        return None

    def is_first_node(self, line: Line) -> bool:
        return all(not ln.text and not ln.comment for ln in self.lines[: line.no - 1])

    def declaration_groups(self) -> Iterator[Tuple[Line, List[Line]]]:
        """Each declaration with its continuation lines."""
        for i, line in enumerate(self.lines):
            if line.kind != "declaration":
                continue
            rest: List[Line] = []
            for nxt in self.lines[i + 1 :]:
                if nxt.kind != "continuation":
                    break
                rest.append(nxt)
            yield line, rest


def _mask(text: str):
    out = list(text)
    comment_lines: set[int] = set()
    comment_starts: set[int] = set()
    strings: List[StringLiteral] = []
    state: str | None = None
    line, line_start = 1, 0
    string_start = 0
    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if state is None:
            if text.startswith("/*", i):
                state = "block"
                comment_lines.add(line)
                if not text[line_start:i].strip():
                    comment_starts.add(line)
                out[i] = out[i + 1] = " "
                i += 2
                continue
            if text.startswith("//", i) and (i == 0 or text[i - 1] != ":"):
                state = "line"
                comment_lines.add(line)
                out[i] = " "
            elif c in "\"'":
                state = c
                string_start = i
                strings.append(StringLiteral(line, i - line_start + 1, c, ""))
        elif state == "block":
            if text.startswith("*/", i):
                out[i] = out[i + 1] = " "
                state = None
                i += 2
                continue
            if c != "\n":
                out[i] = " "
                comment_lines.add(line)
        elif state == "line":
            if c == "\n":
                state = None
            else:
                out[i] = " "
        else:
            if c == "\\" and i + 1 < n and text[i + 1] != "\n":
                out[i] = out[i + 1] = "x"
                i += 2
                continue
            if c == state or c == "\n":
                strings[-1].body = text[string_start + 1 : i]
                state = None
            else:
                out[i] = "x"
        if c == "\n":
            line += 1
            line_start = i + 1
        i += 1
    return "".join(out), comment_lines, comment_starts, strings


Finding = Tuple[int, int, str]
Check = Callable[[ScssSource, Rule], Iterable[Finding]]
CHECKS: Dict[str, Check] = {}


def check(name: str):
    def deco(fn: Check) -> Check:
        CHECKS[name] = fn
        return fn

    return deco


def _values(src: ScssSource) -> Iterator[Tuple[Line, str, int]]:
    for line in src.lines:
        if line.kind in ("declaration", "continuation"):
            yield line, line.value, line.value_col


def _selectors(src: ScssSource) -> Iterator[Line]:
    for line in src.lines:
        if line.kind == "selector":
            yield line


def _selector_text(line: Line) -> str:
    code = line.code.rstrip()
    if code.endswith("{"):
        code = code[:-1]
    return code


def _outside_groups(text: str) -> Iterator[Tuple[int, str]]:
    """Characters of ``text`` that are not inside (), [] with their positions."""
    depth = 0
    for i, c in enumerate(text):
        if c in "([":
            depth += 1
        elif c in ")]":
            depth = max(0, depth - 1)
        elif depth == 0:
            yield i, c


def _js_regex(pattern: str) -> re.Pattern:
    m = re.match(r"^/(.*)/([a-z]*)$", pattern, re.S)
    if not m:
        return re.compile(pattern)
    flags = re.I if "i" in m.group(2) else 0
    return re.compile(m.group(1), flags)


# -- whole-file rules -------------------------------------------------------


@check("no-eol-whitespace")
def _no_eol_whitespace(src: ScssSource, rule: SwitchRule):
    for line in src.lines:
        stripped = line.raw.rstrip(" \t\r")
        if len(stripped) != len(line.raw.rstrip("\r")):
            yield line.no, len(stripped) + 1, "Unexpected whitespace at end of line"


@check("no-missing-end-of-source-newline")
def _end_newline(src: ScssSource, rule: SwitchRule):
    if src.text and not src.text.endswith("\n"):
        last = src.lines[-1]
        yield last.no, len(last.raw), "Unexpected missing end-of-source newline"


@check("max-empty-lines")
def _max_empty_lines(src: ScssSource, rule: LimitRule):
    run = 0
    for line in src.lines:
        if line.raw.strip():
            run = 0
            continue
        run += 1
        if run == rule.limit + 1:
            yield line.no, 1, f"Expected no more than {rule.limit} empty line(s)"


@check("max-line-length")
def _max_line_length(src: ScssSource, rule: LimitRule):
    ignore = rule.option_list("ignore")
    patterns = [_js_regex(p) for p in rule.option_list("ignorePattern")]
    for line in src.lines:
        if len(line.raw) <= rule.limit:
            continue
        if "non-comments" in ignore and not line.comment:
            continue
        if "comments" in ignore and line.comment:
            continue
        if any(p.search(line.raw.strip()) for p in patterns):
            continue
        yield line.no, rule.limit + 1, f"Expected line length to be no more than {rule.limit} characters"


@check("indentation")
def _indentation(src: ScssSource, rule: LimitRule):
    for line in src.lines:
        if line.kind in ("blank", "continuation") or not line.text:
            continue
        lead = line.code[: line.indent]
        if "\t" in lead:
            yield line.no, 1, f"Expected indentation of {rule.limit} spaces per level, found a tab"
            continue
        depth = line.depth - 1 if line.kind == "close" else line.depth
        expected = max(depth, 0) * rule.limit
        if line.indent != expected:
            yield line.no, line.indent + 1, f"Expected indentation of {expected} spaces"


@check("string-quotes")
def _string_quotes(src: ScssSource, rule: KeywordRule):
    want = '"' if rule.value == "double" else "'"
    avoid_escape = rule.options.get("avoidEscape", True)
    for s in src.strings:
        if s.quote == want:
            continue
        if avoid_escape and want in s.body:
            continue
        yield s.line, s.col, f"Expected {rule.value} quotes"


# -- blocks and empty lines -------------------------------------------------


@check("block-opening-brace-space-before")
def _brace_space_before(src: ScssSource, rule: KeywordRule):
    for line in src.lines:
        for m in re.finditer(r"\{", line.code):
            i = m.start()
            before = line.code[:i]
            ok = before.endswith(" ") and not before.endswith("  ") and before.strip() != ""
            if rule.value.startswith("always") and not ok:
                yield line.no, i + 1, 'Expected single space before "{"'
            elif rule.value.startswith("never") and before.endswith((" ", "\t")):
                yield line.no, i + 1, 'Unexpected whitespace before "{"'


@check("block-opening-brace-newline-after")
def _brace_newline_after(src: ScssSource, rule: KeywordRule):
    for line in src.lines:
        for m in re.finditer(r"\{", line.code):
            after = line.code[m.end() :]
            if after.strip() and not after.strip().startswith("}"):
                yield line.no, m.end() + 1, 'Expected newline after "{"'


@check("block-closing-brace-newline-before")
def _brace_newline_before(src: ScssSource, rule: KeywordRule):
    for line in src.lines:
        for m in re.finditer(r"\}", line.code):
            before = line.code[: m.start()]
            if before.strip() and not before.rstrip().endswith("{"):
                yield line.no, m.start() + 1, 'Expected newline before "}"'


@check("block-closing-brace-newline-after")
def _brace_closing_newline_after(src: ScssSource, rule: KeywordRule):
    ignored = set(rule.option_list("ignoreAtRules"))
    for line in src.lines:
        for m in re.finditer(r"\}", line.code):
            after = line.code[m.end() :].strip()
            if not after or after.startswith(("}", ";", ",", ")")):
                continue
            at = re.match(r"@([\w-]+)", after)
            if at and at.group(1) in ignored:
                continue
            yield line.no, m.end() + 1, 'Expected newline after "}"'


@check("rule-empty-line-before")
def _rule_empty_line_before(src: ScssSource, rule: KeywordRule):
    ignore = rule.option_list("ignore")
    for line in src.lines:
        if line.kind != "selector" or src.is_first_node(line):
            continue
        prev = src.previous(line, skip_blank=False)
        if prev is None or prev.kind == "selector" and prev.text.endswith(","):
            continue
        if prev.comment and not prev.code.strip() and "after-comment" in ignore:
            continue
        blank = not prev.raw.strip()
        if rule.value.startswith("always") and not blank:
            yield line.no, line.indent + 1, "Expected empty line before rule"
        elif rule.value.startswith("never") and blank:
            yield line.no, line.indent + 1, "Unexpected empty line before rule"


@check("at-rule-empty-line-before")
def _at_rule_empty_line_before(src: ScssSource, rule: KeywordRule):
    ignore = rule.option_list("ignore")
    excepts = rule.option_list("except")
    for line in src.lines:
        if line.kind != "at-rule" or src.is_first_node(line):
            continue
        prev = src.previous(line, skip_blank=False)
        if prev is None:
            continue
        if prev.comment and not prev.code.strip() and "after-comment" in ignore:
            continue
        expect_blank = rule.value == "always"
        blockless = not line.text.endswith("{")
        before = src.previous(line)
        if (
            "blockless-after-blockless" in excepts
            and blockless
            and before is not None
            and before.kind == "at-rule"
            and not before.text.endswith("{")
        ):
            expect_blank = not expect_blank
        blank = not prev.raw.strip()
        if expect_blank and not blank:
            yield line.no, line.indent + 1, "Expected empty line before at-rule"
        elif not expect_blank and blank:
            yield line.no, line.indent + 1, "Unexpected empty line before at-rule"


@check("comment-empty-line-before")
def _comment_empty_line_before(src: ScssSource, rule: KeywordRule):
    ignore = rule.option_list("ignore")
    for line in src.lines:
        if not line.comment_start or src.is_first_node(line):
            continue
        stripped = line.raw.strip()
        if not stripped.startswith("/*"):
            continue
        if "stylelint-commands" in ignore and stripped[2:].strip().startswith("stylelint-"):
            continue
        prev = src.previous(line, skip_blank=False)
        if prev is None:
            continue
        blank = not prev.raw.strip()
        if rule.value == "always" and not blank:
            yield line.no, line.indent + 1, "Expected empty line before comment"
        elif rule.value == "never" and blank:
            yield line.no, line.indent + 1, "Unexpected empty line before comment"


@check("selector-max-empty-lines")
def _selector_max_empty_lines(src: ScssSource, rule: LimitRule):
    for line in _selectors(src):
        if not line.text.endswith(","):
            continue
        run = 0
        for nxt in src.lines[line.no :]:
            if nxt.raw.strip():
                break
            run += 1
        if run > rule.limit:
            yield line.no + 1, 1, f"Expected no more than {rule.limit} empty line(s) in selector"


# -- declarations -----------------------------------------------------------


@check("declaration-block-trailing-semicolon")
def _trailing_semicolon(src: ScssSource, rule: KeywordRule):
    for line in src.lines:
        if line.kind != "close":
            continue
        prev = src.previous(line)
        if prev is None or prev.kind not in ("declaration", "continuation"):
            continue
        has = prev.text.endswith(";")
        if rule.value == "always" and not has:
            yield prev.no, len(prev.code.rstrip()) + 1, "Expected a trailing semicolon"
        elif rule.value == "never" and has:
            yield prev.no, len(prev.code.rstrip()), "Unexpected trailing semicolon"


@check("declaration-colon-space-before")
def _colon_space_before(src: ScssSource, rule: KeywordRule):
    for line in src.lines:
        if line.kind != "declaration":
            continue
        gap = line.value_col - 1 - (line.prop_col + len(line.prop))
        if rule.value == "never" and gap > 0:
            yield line.no, line.prop_col + len(line.prop) + 1, 'Unexpected whitespace before ":"'
        elif rule.value == "always" and gap != 1:
            yield line.no, line.value_col, 'Expected single space before ":"'


@check("declaration-colon-space-after")
def _colon_space_after(src: ScssSource, rule: KeywordRule):
    for line, rest in src.declaration_groups():
        if rule.value.endswith("single-line") and rest:
            continue
        value = line.value
        if not value.strip() or value.rstrip().endswith("("):
            continue
        if rule.value.startswith("always") and not (value.startswith(" ") and not value.startswith("  ")):
            yield line.no, line.value_col, 'Expected single space after ":" with a single-line declaration'
        elif rule.value.startswith("never") and value[:1].isspace():
            yield line.no, line.value_col, 'Unexpected whitespace after ":" with a single-line declaration'


@check("declaration-colon-newline-after")
def _colon_newline_after(src: ScssSource, rule: KeywordRule):
    for line, rest in src.declaration_groups():
        if not rest or line.prop.startswith("$"):
            continue
        if line.value.strip() and not line.value.strip().endswith("("):
            yield line.no, line.value_col, 'Expected newline after ":" with a multi-line declaration'


@check("declaration-bang-space-before")
def _bang_space_before(src: ScssSource, rule: KeywordRule):
    for line, value, col in _values(src):
        for m in re.finditer(r"!", value):
            before = value[: m.start()]
            if rule.value == "always" and not before.endswith(" "):
                yield line.no, col + m.start() + 1, 'Expected single space before "!"'
            elif rule.value == "never" and before.endswith(" "):
                yield line.no, col + m.start() + 1, 'Unexpected whitespace before "!"'


@check("declaration-bang-space-after")
def _bang_space_after(src: ScssSource, rule: KeywordRule):
    for line, value, col in _values(src):
        for m in re.finditer(r"!(\s*)", value):
            if rule.value == "never" and m.group(1):
                yield line.no, col + m.start() + 1, 'Unexpected whitespace after "!"'
            elif rule.value == "always" and m.group(1) != " ":
                yield line.no, col + m.start() + 1, 'Expected single space after "!"'


@check("declaration-block-semicolon-space-before")
def _semicolon_space_before(src: ScssSource, rule: KeywordRule):
    for line, value, col in _values(src):
        for m in re.finditer(r"(\s+);", value):
            yield line.no, col + m.start() + 1, 'Unexpected whitespace before ";"'


@check("declaration-block-semicolon-newline-after")
def _semicolon_newline_after(src: ScssSource, rule: KeywordRule):
    for line in src.lines:
        if line.kind not in ("declaration", "continuation"):
            continue
        for m in re.finditer(";", line.code):
            if line.code[m.end() :].strip():
                yield line.no, m.end() + 1, 'Expected newline after ";"'


@check("declaration-block-no-duplicate-properties")
def _duplicate_properties(src: ScssSource, rule: SwitchRule):
    consecutive_ok = "consecutive-duplicates" in rule.option_list("ignore")
    blocks: List[List[str]] = [[]]
    for line in src.lines:
        if line.kind == "declaration" and not line.prop.startswith("$"):
            props = blocks[-1]
            prop = line.prop.lower()
            if prop in props and not (consecutive_ok and props[-1] == prop):
                yield line.no, line.prop_col + 1, f'Unexpected duplicate "{prop}"'
            props.append(prop)
        opens = line.code.count("{")
        closes = line.code.count("}")
        for _ in range(closes):
            if len(blocks) > 1:
                blocks.pop()
        for _ in range(opens):
            blocks.append([])


@check("declaration-property-unit-whitelist")
def _unit_allow_list(src: ScssSource, rule: UnitAllowListRule):
    for line, rest in src.declaration_groups():
        allowed = rule.units.get(line.prop.lower())
        if allowed is None:
            continue
        for m in NUMBER_UNIT_RE.finditer(line.value):
            unit = m.group(2).lower()
            if unit in UNITS and unit not in allowed:
                yield line.no, line.value_col + m.start() + 1, f'Unexpected unit "{unit}" for property "{line.prop}"'


@check("property-case")
def _property_case(src: ScssSource, rule: KeywordRule):
    for line in src.lines:
        if line.kind != "declaration" or line.prop.startswith("$"):
            continue
        want = line.prop.lower() if rule.value == "lower" else line.prop.upper()
        if line.prop != want:
            yield line.no, line.prop_col + 1, f'Expected "{line.prop}" to be "{want}"'


@check("font-weight-notation")
def _font_weight(src: ScssSource, rule: KeywordRule):
    relative = "relative" in rule.option_list("ignore")
    for line in src.lines:
        if line.kind != "declaration" or line.prop.lower() != "font-weight":
            continue
        word = line.value.strip().rstrip(";").strip().split(" ")[0].lower()
        if word in ("bolder", "lighter") and relative:
            continue
        if rule.value == "numeric" and word in ("normal", "bold", "bolder", "lighter"):
            yield line.no, line.value_col + line.value.index(line.value.strip()) + 1, "Expected numeric font-weight notation"


@check("font-family-name-quotes")
def _font_family_quotes(src: ScssSource, rule: KeywordRule):
    for line, rest in src.declaration_groups():
        if line.prop.lower() != "font-family":
            continue
        offset = 0
        for family in line.value.rstrip().rstrip(";").split(","):
            name = family.strip()
            start = line.value_col + offset + family.find(name)
            offset += len(family) + 1
            if not name or name[0] in "\"'$" or name.lower() in GENERIC_FONTS:
                continue
            if re.search(r"\s|^\d|[^\w\s-]", name):
                yield line.no, start + 1, f'Expected quotes around "{name}"'


# -- values -----------------------------------------------------------------


@check("color-named")
def _color_named(src: ScssSource, rule: KeywordRule):
    if rule.value != "never":
        return
    for line, value, col in _values(src):
        for m in re.finditer(r"(?<![\w$@#.%/-])([A-Za-z]+)(?![\w(.-])", value):
            word = m.group(1)
            if word.lower() in NAMED_COLORS:
                yield line.no, col + m.start() + 1, f'Unexpected named color "{word}"'


@check("color-hex-case")
def _color_hex_case(src: ScssSource, rule: KeywordRule):
    for line, value, col in _values(src):
        for m in HEX_RE.finditer(value):
            hexv = m.group(0)
            want = hexv.lower() if rule.value == "lower" else hexv.upper()
            if hexv != want:
                yield line.no, col + m.start() + 1, f'Expected "{hexv}" to be "{want}"'


@check("color-hex-length")
def _color_hex_length(src: ScssSource, rule: KeywordRule):
    for line, value, col in _values(src):
        for m in HEX_RE.finditer(value):
            digits = m.group(1)
            if rule.value == "short" and len(digits) in (6, 8):
                pairs = [digits[i : i + 2] for i in range(0, len(digits), 2)]
                if all(p[0].lower() == p[1].lower() for p in pairs):
                    short = "#" + "".join(p[0] for p in pairs)
                    yield line.no, col + m.start() + 1, f'Expected "{m.group(0)}" to be "{short}"'
            elif rule.value == "long" and len(digits) in (3, 4):
                long = "#" + "".join(ch * 2 for ch in digits)
                yield line.no, col + m.start() + 1, f'Expected "{m.group(0)}" to be "{long}"'


@check("number-leading-zero")
def _leading_zero(src: ScssSource, rule: KeywordRule):
    for line, value, col in _values(src):
        if rule.value == "always":
            for m in re.finditer(r"(?<![\w.])\.\d", value):
                yield line.no, col + m.start() + 1, "Expected a leading zero"
        else:
            for m in re.finditer(r"(?<![\w.])0\.\d", value):
                yield line.no, col + m.start() + 1, "Unexpected leading zero"


@check("number-no-trailing-zeros")
def _trailing_zeros(src: ScssSource, rule: SwitchRule):
    for line, value, col in _values(src):
        for m in re.finditer(r"(?<![\w.#])\d*\.\d*?0+(?![\d.])", value):
            yield line.no, col + m.end(), "Unexpected trailing zero(s)"


@check("length-zero-no-unit")
def _zero_unit(src: ScssSource, rule: SwitchRule):
    units = "|".join(LENGTH_UNITS)
    pattern = re.compile(rf"(?<![\w.#$-])0(?:\.0+)?({units})\b", re.I)
    for line, value, col in _values(src):
        for m in pattern.finditer(value):
            yield line.no, col + m.start(1) + 1, "Unexpected unit"


@check("unit-case")
def _unit_case(src: ScssSource, rule: KeywordRule):
    for line, value, col in _values(src):
        for m in NUMBER_UNIT_RE.finditer(value):
            unit = m.group(2)
            if unit.lower() not in UNITS:
                continue
            want = unit.lower() if rule.value == "lower" else unit.upper()
            if unit != want:
                yield line.no, col + m.start(2) + 1, f'Expected "{m.group(0)}" to be "{m.group(1)}{want}"'


@check("function-url-quotes")
def _url_quotes(src: ScssSource, rule: KeywordRule):
    for line in src.lines:
        for m in re.finditer(r"\burl\(\s*([\"']?)", line.code, re.I):
            quoted = bool(m.group(1))
            if rule.value == "never" and quoted:
                yield line.no, m.start(1) + 1, "Unexpected quotes"
            elif rule.value == "always" and not quoted:
                yield line.no, m.end() + 1, "Expected quotes"


@check("function-name-case")
def _function_name_case(src: ScssSource, rule: KeywordRule):
    ignored = [_js_regex(p) for p in rule.option_list("ignoreFunctions")]
    for line, value, col in _values(src):
        for m in re.finditer(r"(?<![\w$.-])([A-Za-z][\w.-]*)\(", value):
            name = m.group(1)
            if any(p.search(name) for p in ignored):
                continue
            want = name.lower() if rule.value == "lower" else name.upper()
            if name != want:
                yield line.no, col + m.start() + 1, f'Expected "{name}" to be "{want}"'


@check("function-parentheses-space-inside")
def _paren_space_inside(src: ScssSource, rule: KeywordRule):
    for line, rest in src.declaration_groups():
        if rest:
            continue
        value = line.value
        for m in re.finditer(r"\w\((\s+)\S", value):
            yield line.no, line.value_col + m.start(1) + 1, 'Unexpected whitespace after "("'
        for m in re.finditer(r"\S(\s+)\)", value):
            yield line.no, line.value_col + m.start(1) + 1, 'Unexpected whitespace before ")"'


@check("function-whitespace-after")
def _function_whitespace_after(src: ScssSource, rule: KeywordRule):
    for line, value, col in _values(src):
        for m in re.finditer(r"\)(?=[^\s,;)\]}!/*+-])", value):
            yield line.no, col + m.end() + 1, 'Expected whitespace after ")"'


def _comma_checks(src: ScssSource, rule: KeywordRule, inside: bool, side: str):
    for line, rest in src.declaration_groups():
        if rule.value.endswith("single-line") and rest:
            continue
        value = line.value.rstrip()
        depth = 0
        for i, c in enumerate(value):
            if c == "(":
                depth += 1
            elif c == ")":
                depth = max(0, depth - 1)
            elif c == "," and (depth > 0) == inside:
                col = line.value_col + i + 1
                if side == "after":
                    nxt = value[i + 1 : i + 2]
                    if rule.value.startswith("always") and nxt and nxt != " ":
                        yield line.no, col, 'Expected single space after ","'
                    elif rule.value.startswith("never") and nxt.isspace():
                        yield line.no, col, 'Unexpected whitespace after ","'
                else:
                    prev = value[i - 1 : i] if i else ""
                    if rule.value.startswith("never") and prev.isspace():
                        yield line.no, col, 'Unexpected whitespace before ","'
                    elif rule.value.startswith("always") and prev != " ":
                        yield line.no, col, 'Expected single space before ","'


@check("function-comma-space-after")
def _function_comma_after(src: ScssSource, rule: KeywordRule):
    return _comma_checks(src, rule, inside=True, side="after")


@check("function-comma-space-before")
def _function_comma_before(src: ScssSource, rule: KeywordRule):
    return _comma_checks(src, rule, inside=True, side="before")


@check("value-list-comma-space-after")
def _value_comma_after(src: ScssSource, rule: KeywordRule):
    return _comma_checks(src, rule, inside=False, side="after")


@check("value-list-comma-space-before")
def _value_comma_before(src: ScssSource, rule: KeywordRule):
    return _comma_checks(src, rule, inside=False, side="before")


@check("value-list-comma-newline-after")
def _value_comma_newline(src: ScssSource, rule: KeywordRule):
    for line, rest in src.declaration_groups():
        if not rest or line.prop.startswith("$"):
            continue
        for part in [line, *rest]:
            value = part.value.rstrip()
            for i, c in _outside_groups(value):
                if c == "," and value[i + 1 :].strip():
                    yield part.no, part.value_col + i + 1, 'Expected newline after ","'


# -- selectors --------------------------------------------------------------


@check("selector-class-pattern")
def _class_pattern(src: ScssSource, rule: PatternRule):
    for line in _selectors(src):
        for m in re.finditer(r"(?<![\w-])\.(-?[A-Za-z_][\w-]*)", _selector_text(line)):
            name = m.group(1)
            if not rule.pattern.match(name):
                msg = rule.message or f'Expected class selector ".{name}" to match specified pattern'
                yield line.no, m.start() + 1, msg.replace(f" ({rule.name})", "")


@check("selector-id-pattern")
def _id_pattern(src: ScssSource, rule: PatternRule):
    for line in _selectors(src):
        for m in re.finditer(r"(?<![\w&-])#(-?[A-Za-z_][\w-]*)", _selector_text(line)):
            name = m.group(1)
            if not rule.pattern.match(name):
                msg = rule.message or f'Expected ID selector "#{name}" to match specified pattern'
                yield line.no, m.start() + 1, msg.replace(f" ({rule.name})", "")


@check("selector-list-comma-newline-after")
def _selector_comma_newline(src: ScssSource, rule: KeywordRule):
    for line in _selectors(src):
        text = _selector_text(line).rstrip()
        for i, c in _outside_groups(text):
            if c == "," and text[i + 1 :].strip():
                yield line.no, i + 1, 'Expected newline after ","'


@check("selector-list-comma-space-before")
def _selector_comma_space_before(src: ScssSource, rule: KeywordRule):
    for line in _selectors(src):
        text = _selector_text(line)
        for i, c in _outside_groups(text):
            if c == "," and i and text[i - 1].isspace() and text[:i].strip():
                yield line.no, i + 1, 'Unexpected whitespace before ","'


@check("selector-combinator-space-before")
def _combinator_before(src: ScssSource, rule: KeywordRule):
    for line in _selectors(src):
        text = _selector_text(line)
        for i, c in _outside_groups(text):
            if c in ">+~" and text[:i].strip() and not text[:i].rstrip().endswith(","):
                if rule.value == "always" and text[i - 1] != " ":
                    yield line.no, i + 1, f'Expected single space before "{c}" combinator'
                elif rule.value == "never" and text[i - 1].isspace():
                    yield line.no, i + 1, f'Unexpected whitespace before "{c}" combinator'


@check("selector-combinator-space-after")
def _combinator_after(src: ScssSource, rule: KeywordRule):
    for line in _selectors(src):
        text = _selector_text(line)
        for i, c in _outside_groups(text):
            if c in ">+~":
                nxt = text[i + 1 : i + 2]
                if rule.value == "always" and nxt != " ":
                    yield line.no, i + 1, f'Expected single space after "{c}" combinator'
                elif rule.value == "never" and nxt.isspace():
                    yield line.no, i + 1, f'Unexpected whitespace after "{c}" combinator'


def _attributes(src: ScssSource) -> Iterator[Tuple[Line, int, str]]:
    for line in _selectors(src):
        for m in re.finditer(r"\[([^\]]*)\]", _selector_text(line)):
            yield line, m.start(1), m.group(1)


@check("selector-attribute-brackets-space-inside")
def _attr_brackets(src: ScssSource, rule: KeywordRule):
    for line, start, body in _attributes(src):
        if body[:1].isspace():
            yield line.no, start + 1, 'Unexpected whitespace after "["'
        if body[-1:].isspace():
            yield line.no, start + len(body), 'Unexpected whitespace before "]"'


@check("selector-attribute-operator-space-before")
def _attr_op_before(src: ScssSource, rule: KeywordRule):
    for line, start, body in _attributes(src):
        m = re.search(r"(\s*)([~|^$*]?=)", body)
        if m and m.group(1):
            yield line.no, start + m.start(2) + 1, f'Unexpected whitespace before "{m.group(2)}"'


@check("selector-attribute-operator-space-after")
def _attr_op_after(src: ScssSource, rule: KeywordRule):
    for line, start, body in _attributes(src):
        m = re.search(r"([~|^$*]?=)(\s+)", body)
        if m:
            yield line.no, start + m.start(1) + 1, f'Unexpected whitespace after "{m.group(1)}"'


@check("selector-attribute-quotes")
def _attr_quotes(src: ScssSource, rule: KeywordRule):
    for line, start, body in _attributes(src):
        m = re.search(r"[~|^$*]?=\s*(\S+?)\s*(?:\s[is])?$", body)
        if m and m.group(1)[0] not in "\"'" and rule.value == "always":
            yield line.no, start + m.start(1) + 1, f'Expected quotes around "{m.group(1)}"'


def _pseudos(src: ScssSource) -> Iterator[Tuple[Line, int, str, str]]:
    for line in _selectors(src):
        for m in re.finditer(r"(?<!:)(::?)([A-Za-z][\w-]*)", _selector_text(line)):
            yield line, m.start(), m.group(1), m.group(2)


@check("selector-pseudo-element-colon-notation")
def _pseudo_colon(src: ScssSource, rule: KeywordRule):
    for line, col, colons, name in _pseudos(src):
        if name.lower() not in ("before", "after", "first-line", "first-letter"):
            continue
        if rule.value == "double" and colons == ":":
            yield line.no, col + 1, "Expected double colon pseudo-element notation"
        elif rule.value == "single" and colons == "::":
            yield line.no, col + 1, "Expected single colon pseudo-element notation"


@check("selector-pseudo-class-case")
def _pseudo_class_case(src: ScssSource, rule: KeywordRule):
    for line, col, colons, name in _pseudos(src):
        if colons == "::" or name.lower() in PSEUDO_ELEMENTS:
            continue
        want = name.lower() if rule.value == "lower" else name.upper()
        if name != want:
            yield line.no, col + 1, f'Expected ":{name}" to be ":{want}"'


@check("selector-pseudo-element-case")
def _pseudo_element_case(src: ScssSource, rule: KeywordRule):
    for line, col, colons, name in _pseudos(src):
        if colons == ":" and name.lower() not in PSEUDO_ELEMENTS:
            continue
        want = name.lower() if rule.value == "lower" else name.upper()
        if name != want:
            yield line.no, col + 1, f'Expected "{colons}{name}" to be "{colons}{want}"'


@check("selector-pseudo-class-parentheses-space-inside")
def _pseudo_parens(src: ScssSource, rule: KeywordRule):
    for line in _selectors(src):
        text = _selector_text(line)
        for m in re.finditer(r":[\w-]+\((\s*)[^)]*?(\s*)\)", text):
            if m.group(1):
                yield line.no, m.start(1) + 1, 'Unexpected whitespace after "("'
            if m.group(2):
                yield line.no, m.start(2) + 1, 'Unexpected whitespace before ")"'


@check("selector-type-case")
def _type_case(src: ScssSource, rule: KeywordRule):
    for line in _selectors(src):
        text = _selector_text(line)
        for m in re.finditer(r"(?:^|(?<=[\s,>+~(]))([A-Za-z][\w-]*)", text):
            name = m.group(1)
            want = name.lower() if rule.value == "lower" else name.upper()
            if name != want:
                yield line.no, m.start(1) + 1, f'Expected "{name}" to be "{want}"'


# -- at-rules ---------------------------------------------------------------


def _at_rules(src: ScssSource) -> Iterator[Tuple[Line, str, int]]:
    for line in src.lines:
        if line.kind != "at-rule":
            continue
        m = re.match(r"@([\w-]+)", line.text)
        if m:
            yield line, m.group(1), line.indent


@check("at-rule-name-case")
def _at_rule_case(src: ScssSource, rule: KeywordRule):
    for line, name, col in _at_rules(src):
        want = name.lower() if rule.value == "lower" else name.upper()
        if name != want:
            yield line.no, col + 1, f'Expected "@{name}" to be "@{want}"'


@check("at-rule-no-unknown")
def _at_rule_unknown(src: ScssSource, rule: SwitchRule):
    ignored = set(rule.option_list("ignoreAtRules"))
    for line, name, col in _at_rules(src):
        bare = re.sub(r"^-\w+-", "", name.lower())
        if bare in KNOWN_AT_RULES or name in ignored:
            continue
        yield line.no, col + 1, f'Unexpected unknown at-rule "@{name}"'


@check("at-rule-name-space-after")
def _at_rule_space(src: ScssSource, rule: KeywordRule):
    for line, name, col in _at_rules(src):
        after = line.text[len(name) + 1 :]
        if after.rstrip(";{ ") and not after.startswith(" "):
            yield line.no, col + len(name) + 2, f'Expected single space after "@{name}"'


@check("at-rule-semicolon-newline-after")
def _at_rule_semicolon(src: ScssSource, rule: KeywordRule):
    for line, name, col in _at_rules(src):
        for m in re.finditer(";", line.code):
            if line.code[m.end() :].strip():
                yield line.no, m.end() + 1, 'Expected newline after ";"'


def _media_queries(src: ScssSource) -> Iterator[Tuple[Line, str, int]]:
    for line, name, col in _at_rules(src):
        if name.lower() == "media":
            start = line.indent + len(name) + 1
            yield line, line.code[start:].rstrip().rstrip("{").rstrip(), start


@check("media-feature-colon-space-after")
def _media_colon_after(src: ScssSource, rule: KeywordRule):
    for line, params, start in _media_queries(src):
        for m in re.finditer(r"\([\w-]+\s*:(\s*)", params):
            if rule.value == "always" and m.group(1) != " ":
                yield line.no, start + m.end() + 1, 'Expected single space after ":"'
            elif rule.value == "never" and m.group(1):
                yield line.no, start + m.end() + 1, 'Unexpected whitespace after ":"'


@check("media-feature-colon-space-before")
def _media_colon_before(src: ScssSource, rule: KeywordRule):
    for line, params, start in _media_queries(src):
        for m in re.finditer(r"\([\w-]+(\s*):", params):
            if rule.value == "never" and m.group(1):
                yield line.no, start + m.start(1) + 1, 'Unexpected whitespace before ":"'
            elif rule.value == "always" and m.group(1) != " ":
                yield line.no, start + m.end(), 'Expected single space before ":"'


@check("media-feature-range-operator-space-after")
def _media_range_after(src: ScssSource, rule: KeywordRule):
    for line, params, start in _media_queries(src):
        for m in re.finditer(r"[<>]=?|(?<![<>])=", params):
            nxt = params[m.end() : m.end() + 1]
            if rule.value == "always" and nxt != " ":
                yield line.no, start + m.end() + 1, f'Expected single space after range operator "{m.group()}"'


@check("media-feature-range-operator-space-before")
def _media_range_before(src: ScssSource, rule: KeywordRule):
    for line, params, start in _media_queries(src):
        for m in re.finditer(r"[<>]=?|(?<![<>])=", params):
            prev = params[m.start() - 1 : m.start()]
            if rule.value == "always" and prev != " ":
                yield line.no, start + m.start() + 1, f'Expected single space before range operator "{m.group()}"'


@check("media-query-list-comma-space-after")
def _media_comma_after(src: ScssSource, rule: KeywordRule):
    for line, params, start in _media_queries(src):
        for i, c in _outside_groups(params):
            if c == "," and params[i + 1 : i + 2] not in (" ", ""):
                yield line.no, start + i + 1, 'Expected single space after ","'


@check("media-query-list-comma-space-before")
def _media_comma_before(src: ScssSource, rule: KeywordRule):
    for line, params, start in _media_queries(src):
        for i, c in _outside_groups(params):
            if c == "," and i and params[i - 1].isspace():
                yield line.no, start + i + 1, 'Unexpected whitespace before ","'


class ScssChecker:
    """Runs every rule of ``ruleset`` that has a built-in checker."""

    def __init__(self, ruleset: Ruleset):
        self.ruleset = ruleset
        self.enforced = [
            r
            for r in ruleset
            if r.name in CHECKS and not (isinstance(r, SwitchRule) and not r.enabled)
        ]
        self.unsupported = [r.name for r in ruleset if r.name not in CHECKS]

    def check_text(self, path: Path | str, text: str) -> List[Violation]:
        src = ScssSource(path, text)
        found: List[Violation] = []
        for rule in self.enforced:
            for line, col, message in CHECKS[rule.name](src, rule) or ():
                found.append(
                    Violation(
                        file=src.path,
                        line=line,
                        column=col,
                        rule=rule.name,
                        message=message,
                    )
                )
        return sorted(found)

    def check_files(self, paths: Iterable[Path]) -> List[Violation]:
        found: List[Violation] = []
        for path in paths:
            found.extend(self.check_text(path, Path(path).read_text(encoding="utf-8")))
        return found
