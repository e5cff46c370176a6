# tests/test_ruleset.py

from __future__ import annotations

import pytest

from sitebuild.lint import JS_RULESET, SCSS_RULESET
from sitebuild.lint.ruleset import (
    KeywordRule,
    LimitRule,
    PatternRule,
    RuleSchema,
    SeverityRule,
    SwitchRule,
    UnitAllowListRule,
    load_ruleset,
)
from sitebuild.orchestrator.errors import ConfigurationError

SCHEMA = {
    "color-named": RuleSchema(KeywordRule, ("never", "always-where-possible"), ("ignore",)),
    "indentation": RuleSchema(LimitRule),
    "no-eol-whitespace": RuleSchema(SwitchRule),
    "selector-class-pattern": RuleSchema(PatternRule, (), ("message",)),
}


def test_bundled_rulesets_load() -> None:
    rule = SCSS_RULESET.get("color-named")
    assert isinstance(rule, KeywordRule)
    assert rule.value == "never"
    assert isinstance(SCSS_RULESET.get("indentation"), LimitRule)
    assert isinstance(SCSS_RULESET.get("declaration-property-unit-whitelist"), UnitAllowListRule)
    assert isinstance(JS_RULESET.get("eqeqeq"), SeverityRule)
    assert JS_RULESET.get("eqeqeq").value == "always"


def test_rules_keep_declaration_order() -> None:
    table = {"indentation": 2, "color-named": "never"}
    assert load_ruleset("t", table, SCHEMA).names() == ["indentation", "color-named"]


def test_unknown_rule() -> None:
    with pytest.raises(ConfigurationError, match="unknown rule 'colour-named'"):
        load_ruleset("t", {"colour-named": "never"}, SCHEMA)


def test_bad_keyword() -> None:
    with pytest.raises(ConfigurationError, match="color-named"):
        load_ruleset("t", {"color-named": "sometimes"}, SCHEMA)


def test_bad_limit() -> None:
    with pytest.raises(ConfigurationError):
        load_ruleset("t", {"indentation": "tab"}, SCHEMA)
    with pytest.raises(ConfigurationError):
        load_ruleset("t", {"indentation": True}, SCHEMA)


def test_unknown_option() -> None:
    with pytest.raises(ConfigurationError, match="unknown option"):
        load_ruleset("t", {"color-named": ["never", {"except": ["x"]}]}, SCHEMA)


def test_invalid_pattern() -> None:
    with pytest.raises(ConfigurationError, match="invalid pattern"):
        load_ruleset("t", {"selector-class-pattern": "([a-z"}, SCHEMA)


def test_pattern_message_option() -> None:
    ruleset = load_ruleset(
        "t", {"selector-class-pattern": ["^[a-z]+$", {"message": "lowercase only"}]}, SCHEMA
    )
    rule = ruleset.get("selector-class-pattern")
    assert rule.message == "lowercase only"
    assert rule.pattern.match("abc")


def test_switch_requires_bool() -> None:
    with pytest.raises(ConfigurationError):
        load_ruleset("t", {"no-eol-whitespace": "yes"}, SCHEMA)
