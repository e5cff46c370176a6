"""Lint rule tables, built-in checkers and external engine adapters."""

from .eslint_rules import ESLINT_RULES, JS_RULESET
from .js import JsChecker
from .report import Violation, report
from .scss import ScssChecker
from .stylelint_rules import SCSS_RULESET, STYLELINT_RULES

__all__ = [
    "ESLINT_RULES",
    "JS_RULESET",
    "JsChecker",
    "SCSS_RULESET",
    "STYLELINT_RULES",
    "ScssChecker",
    "Violation",
    "report",
]
