"""SCSS ruleset: the WordPress coding standards stylelint config.

Taken from
https://github.com/WordPress-Coding-Standards/stylelint-config-wordpress/blob/master/index.js
"""

from __future__ import annotations

from .ruleset import (
    KeywordRule,
    LimitRule,
    PatternRule,
    RuleSchema,
    SwitchRule,
    UnitAllowListRule,
    load_ruleset,
)

STYLELINT_RULES = {
    "at-rule-empty-line-before": [
        "always",
        {"except": ["blockless-after-blockless"], "ignore": ["after-comment"]},
    ],
    "at-rule-name-case": "lower",
    "at-rule-name-space-after": "always-single-line",
    "at-rule-no-unknown": [
        True,
        {"ignoreAtRules": ["function", "if", "else", "each", "include", "mixin"]},
    ],
    "at-rule-semicolon-newline-after": "always",
    "block-closing-brace-newline-after": "always",
    "block-closing-brace-newline-before": "always",
    "block-opening-brace-newline-after": "always",
    "block-opening-brace-space-before": "always",
    "color-hex-case": "lower",
    "color-hex-length": "short",
    "color-named": "never",
    "comment-empty-line-before": ["always", {"ignore": ["stylelint-commands"]}],
    "declaration-bang-space-after": "never",
    "declaration-bang-space-before": "always",
    "declaration-block-no-duplicate-properties": [
        True,
        {"ignore": ["consecutive-duplicates"]},
    ],
    "declaration-block-semicolon-newline-after": "always",
    "declaration-block-semicolon-space-before": "never",
    "declaration-block-trailing-semicolon": "always",
    "declaration-colon-newline-after": "always-multi-line",
    "declaration-colon-space-after": "always-single-line",
    "declaration-colon-space-before": "never",
    "declaration-property-unit-whitelist": {"line-height": ["px"]},
    "font-family-name-quotes": "always-where-recommended",
    "font-weight-notation": ["numeric", {"ignore": ["relative"]}],
    "function-comma-space-after": "always",
    "function-comma-space-before": "never",
    "function-max-empty-lines": 1,
    "function-name-case": [
        "lower",
        {"ignoreFunctions": ["/^DXImageTransform.Microsoft.*$/"]},
    ],
    "function-parentheses-space-inside": "never",
    "function-url-quotes": "never",
    "function-whitespace-after": "always",
    # JetBrains default indentation
    "indentation": 2,
    "length-zero-no-unit": True,
    "max-empty-lines": 2,
    "max-line-length": [
        80,
        {
            "ignore": "non-comments",
            "ignorePattern": [
                "/(https?://[0-9,a-z]*.*)|(^description\\:.+)|(^tags\\:.+)/i"
            ],
        },
    ],
    "media-feature-colon-space-after": "always",
    "media-feature-colon-space-before": "never",
    "media-feature-range-operator-space-after": "always",
    "media-feature-range-operator-space-before": "always",
    "media-query-list-comma-newline-after": "always-multi-line",
    "media-query-list-comma-space-after": "always-single-line",
    "media-query-list-comma-space-before": "never",
    "no-eol-whitespace": True,
    "no-missing-end-of-source-newline": True,
    "number-leading-zero": "always",
    "number-no-trailing-zeros": True,
    "property-case": "lower",
    "rule-empty-line-before": ["always", {"ignore": ["after-comment"]}],
    "selector-attribute-brackets-space-inside": "never",
    "selector-attribute-operator-space-after": "never",
    "selector-attribute-operator-space-before": "never",
    "selector-attribute-quotes": "always",
    "selector-class-pattern": [
        "^[a-z]+(-[a-z]+)*",
        {
            "message": "Selector should use lowercase and separate words with hyphens (selector-class-pattern)",
        },
    ],
    "selector-id-pattern": [
        "^[a-z]+(-[a-z]+)*",
        {
            "message": "Selector should use lowercase and separate words with hyphens (selector-id-pattern)",
        },
    ],
    "selector-combinator-space-after": "always",
    "selector-combinator-space-before": "always",
    "selector-list-comma-newline-after": "always",
    "selector-list-comma-space-before": "never",
    "selector-max-empty-lines": 0,
    "selector-pseudo-class-case": "lower",
    "selector-pseudo-class-parentheses-space-inside": "never",
    "selector-pseudo-element-case": "lower",
    "selector-pseudo-element-colon-notation": "double",
    "selector-type-case": "lower",
    "string-quotes": "double",
    "unit-case": "lower",
    "value-keyword-case": "lower",
    "value-list-comma-newline-after": "always-multi-line",
    "value-list-comma-space-after": "always-single-line",
    "value-list-comma-space-before": "never",
}


CASE = ("lower", "upper")
ALWAYS_NEVER = ("always", "never")
SPACING = ("always", "never", "always-single-line", "never-single-line")
NEWLINES = ("always", "always-single-line", "never-single-line", "always-multi-line", "never-multi-line")

_KEYWORDS = {
    "at-rule-empty-line-before": (ALWAYS_NEVER, ("except", "ignore", "ignoreAtRules")),
    "at-rule-name-case": (CASE, ()),
    "at-rule-name-space-after": (("always", "always-single-line"), ()),
    "at-rule-semicolon-newline-after": (("always",), ()),
    "block-closing-brace-newline-after": (NEWLINES, ("ignoreAtRules",)),
    "block-closing-brace-newline-before": (NEWLINES, ()),
    "block-opening-brace-newline-after": (NEWLINES, ()),
    "block-opening-brace-space-before": (SPACING, ()),
    "color-hex-case": (CASE, ()),
    "color-hex-length": (("short", "long"), ()),
    "color-named": (("never", "always-where-possible"), ("ignore", "ignoreProperties")),
    "comment-empty-line-before": (ALWAYS_NEVER, ("except", "ignore")),
    "declaration-bang-space-after": (ALWAYS_NEVER, ()),
    "declaration-bang-space-before": (ALWAYS_NEVER, ()),
    "declaration-block-semicolon-newline-after": (NEWLINES, ()),
    "declaration-block-semicolon-space-before": (SPACING, ()),
    "declaration-block-trailing-semicolon": (ALWAYS_NEVER, ()),
    "declaration-colon-newline-after": (("always", "always-multi-line"), ()),
    "declaration-colon-space-after": (SPACING, ()),
    "declaration-colon-space-before": (ALWAYS_NEVER, ()),
    "font-family-name-quotes": (
        ("always-where-recommended", "always-where-required", "always-unless-keyword"),
        (),
    ),
    "font-weight-notation": (("numeric", "named-where-possible"), ("ignore",)),
    "function-comma-space-after": (SPACING, ()),
    "function-comma-space-before": (SPACING, ()),
    "function-name-case": (CASE, ("ignoreFunctions",)),
    "function-parentheses-space-inside": (SPACING, ()),
    "function-url-quotes": (ALWAYS_NEVER, ("except",)),
    "function-whitespace-after": (ALWAYS_NEVER, ()),
    "media-feature-colon-space-after": (ALWAYS_NEVER, ()),
    "media-feature-colon-space-before": (ALWAYS_NEVER, ()),
    "media-feature-range-operator-space-after": (ALWAYS_NEVER, ()),
    "media-feature-range-operator-space-before": (ALWAYS_NEVER, ()),
    "media-query-list-comma-newline-after": (NEWLINES, ()),
    "media-query-list-comma-space-after": (SPACING, ()),
    "media-query-list-comma-space-before": (SPACING, ()),
    "number-leading-zero": (ALWAYS_NEVER, ()),
    "property-case": (CASE, ()),
    "rule-empty-line-before": (
        ("always", "never", "always-multi-line", "never-multi-line"),
        ("except", "ignore"),
    ),
    "selector-attribute-brackets-space-inside": (ALWAYS_NEVER, ()),
    "selector-attribute-operator-space-after": (ALWAYS_NEVER, ()),
    "selector-attribute-operator-space-before": (ALWAYS_NEVER, ()),
    "selector-attribute-quotes": (ALWAYS_NEVER, ()),
    "selector-combinator-space-after": (ALWAYS_NEVER, ()),
    "selector-combinator-space-before": (ALWAYS_NEVER, ()),
    "selector-list-comma-newline-after": (NEWLINES, ()),
    "selector-list-comma-space-before": (SPACING, ()),
    "selector-pseudo-class-case": (CASE, ()),
    "selector-pseudo-class-parentheses-space-inside": (ALWAYS_NEVER, ()),
    "selector-pseudo-element-case": (CASE, ()),
    "selector-pseudo-element-colon-notation": (("single", "double"), ()),
    "selector-type-case": (CASE, ("ignoreTypes",)),
    "string-quotes": (("single", "double"), ("avoidEscape",)),
    "unit-case": (CASE, ()),
    "value-keyword-case": (CASE, ("ignoreKeywords", "ignoreProperties")),
    "value-list-comma-newline-after": (NEWLINES, ()),
    "value-list-comma-space-after": (SPACING, ()),
    "value-list-comma-space-before": (SPACING, ()),
}

_SWITCHES = {
    "at-rule-no-unknown": ("ignoreAtRules",),
    "declaration-block-no-duplicate-properties": ("ignore", "ignoreProperties"),
    "length-zero-no-unit": ("ignore",),
    "no-eol-whitespace": ("ignore",),
    "no-missing-end-of-source-newline": (),
    "number-no-trailing-zeros": (),
}

_LIMITS = {
    "function-max-empty-lines": (),
    "indentation": ("baseIndentLevel", "indentInsideParens", "except", "ignore"),
    "max-empty-lines": ("ignore",),
    "max-line-length": ("ignore", "ignorePattern"),
    "selector-max-empty-lines": (),
}

STYLELINT_SCHEMA = {
    **{n: RuleSchema(KeywordRule, kw, opts) for n, (kw, opts) in _KEYWORDS.items()},
    **{n: RuleSchema(SwitchRule, (), opts) for n, opts in _SWITCHES.items()},
    **{n: RuleSchema(LimitRule, (), opts) for n, opts in _LIMITS.items()},
    "selector-class-pattern": RuleSchema(PatternRule, (), ("message", "resolveNestedSelectors")),
    "selector-id-pattern": RuleSchema(PatternRule, (), ("message",)),
    "declaration-property-unit-whitelist": RuleSchema(UnitAllowListRule, (), ()),
}

SCSS_RULESET = load_ruleset("stylelint", STYLELINT_RULES, STYLELINT_SCHEMA)
