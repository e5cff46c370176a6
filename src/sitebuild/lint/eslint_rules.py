"""JS ruleset, eslint config syntax."""

from __future__ import annotations

from .ruleset import RuleSchema, SeverityRule, load_ruleset

ESLINT_RULES = {
    "no-debugger": "error",
    "no-trailing-spaces": "error",
    "no-tabs": "error",
    "eol-last": ["error", "always"],
    "eqeqeq": ["error", "always"],
    "no-multiple-empty-lines": ["error", {"max": 2}],
}

ESLINT_SCHEMA = {
    "no-debugger": RuleSchema(SeverityRule),
    "no-trailing-spaces": RuleSchema(SeverityRule, (), ("skipBlankLines", "ignoreComments")),
    "no-tabs": RuleSchema(SeverityRule, (), ("allowIndentationTabs",)),
    "eol-last": RuleSchema(SeverityRule, ("always", "never")),
    "eqeqeq": RuleSchema(SeverityRule, ("always", "smart"), ("null",)),
    "no-multiple-empty-lines": RuleSchema(SeverityRule, (), ("max", "maxEOF", "maxBOF")),
}

JS_RULESET = load_ruleset("eslint", ESLINT_RULES, ESLINT_SCHEMA)
