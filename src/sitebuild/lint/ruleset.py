"""Typed lint rule records, validated once against a known schema.

Rule tables are written the way stylelint and eslint configs are written:
``name: primary`` or ``name: [primary, {options}]``. ``load_ruleset`` turns a
table into an ordered ``Ruleset`` of typed records and raises
``ConfigurationError`` for unknown rules, bad primaries or unknown options.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Tuple, Type

from ..orchestrator.errors import ConfigurationError


@dataclass(frozen=True)
class Rule:
    name: str
    options: Dict[str, Any] = field(default_factory=dict)

    def option_list(self, key: str) -> Tuple[str, ...]:
        value = self.options.get(key, ())
        if isinstance(value, str):
            return (value,)
        return tuple(value)


@dataclass(frozen=True)
class KeywordRule(Rule):
    value: str = ""


@dataclass(frozen=True)
class SwitchRule(Rule):
    enabled: bool = True


@dataclass(frozen=True)
class LimitRule(Rule):
    limit: int = 0


@dataclass(frozen=True)
class PatternRule(Rule):
    pattern: re.Pattern = re.compile("")

    @property
    def message(self) -> str | None:
        return self.options.get("message")


@dataclass(frozen=True)
class UnitAllowListRule(Rule):
    units: Dict[str, Tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class SeverityRule(Rule):
    """eslint style: ``"error"`` or ``["error", value_or_options]``."""

    level: str = "error"
    value: str | None = None


@dataclass(frozen=True)
class RuleSchema:
    kind: Type[Rule]
    keywords: Tuple[str, ...] = ()
    option_keys: Tuple[str, ...] = ()


SEVERITIES = {"off": "off", "warn": "warn", "error": "error", 0: "off", 1: "warn", 2: "error"}


def _split(name: str, raw: Any) -> tuple[Any, dict]:
    if isinstance(raw, list):
        if not raw or len(raw) > 2:
            raise ConfigurationError(f"Rule '{name}': expected [primary, options]")
        primary = raw[0]
        options = raw[1] if len(raw) == 2 else {}
        return primary, options
    return raw, {}


def _build(name: str, raw: Any, schema: RuleSchema) -> Rule:
    if schema.kind is SeverityRule:
        level = raw[0] if isinstance(raw, list) and raw else raw
        if level not in SEVERITIES:
            raise ConfigurationError(f"Rule '{name}': unknown severity {level!r}")
        extra = raw[1:] if isinstance(raw, list) else []
        value: str | None = None
        options: dict = {}
        for item in extra:
            if isinstance(item, dict):
                options = item
            elif isinstance(item, str) and item in schema.keywords:
                value = item
            else:
                raise ConfigurationError(f"Rule '{name}': unexpected value {item!r}")
        _check_options(name, options, schema)
        return SeverityRule(name=name, options=options, level=SEVERITIES[level], value=value)

    primary, options = _split(name, raw)
    if not isinstance(options, dict):
        raise ConfigurationError(f"Rule '{name}': options must be a mapping")
    _check_options(name, options, schema)

    if schema.kind is KeywordRule:
        if primary not in schema.keywords:
            raise ConfigurationError(
                f"Rule '{name}': {primary!r} is not one of {', '.join(schema.keywords)}"
            )
        return KeywordRule(name=name, options=options, value=primary)
    if schema.kind is SwitchRule:
        if not isinstance(primary, bool):
            raise ConfigurationError(f"Rule '{name}': expected true or false")
        return SwitchRule(name=name, options=options, enabled=primary)
    if schema.kind is LimitRule:
        if isinstance(primary, bool) or not isinstance(primary, int) or primary < 0:
            raise ConfigurationError(f"Rule '{name}': expected a non-negative integer")
        return LimitRule(name=name, options=options, limit=primary)
    if schema.kind is PatternRule:
        try:
            pattern = re.compile(primary)
        except (re.error, TypeError) as e:
            raise ConfigurationError(f"Rule '{name}': invalid pattern: {e}") from e
        return PatternRule(name=name, options=options, pattern=pattern)
    if schema.kind is UnitAllowListRule:
        if not isinstance(primary, dict) or not all(
            isinstance(v, list) for v in primary.values()
        ):
            raise ConfigurationError(f"Rule '{name}': expected property -> [units]")
        units = {prop: tuple(v) for prop, v in primary.items()}
        return UnitAllowListRule(name=name, options=options, units=units)
    raise ConfigurationError(f"Rule '{name}': unsupported rule kind {schema.kind!r}")


def _check_options(name: str, options: dict, schema: RuleSchema) -> None:
    unknown = sorted(set(options) - set(schema.option_keys))
    if unknown:
        raise ConfigurationError(
            f"Rule '{name}': unknown option(s) {', '.join(unknown)}"
        )


class Ruleset:
    def __init__(self, name: str, rules: Mapping[str, Rule]):
        self.name = name
        self._rules = dict(rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def get(self, name: str) -> Rule | None:
        return self._rules.get(name)

    def names(self) -> list[str]:
        return list(self._rules)


def load_ruleset(
    name: str, table: Mapping[str, Any], schema: Mapping[str, RuleSchema]
) -> Ruleset:
    rules: dict[str, Rule] = {}
    for rule_name, raw in table.items():
        rule_schema = schema.get(rule_name)
        if rule_schema is None:
            raise ConfigurationError(f"{name}: unknown rule '{rule_name}'")
        rules[rule_name] = _build(rule_name, raw, rule_schema)
    return Ruleset(name, rules)
