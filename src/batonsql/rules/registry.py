"""Rule plugin registry. Rules register themselves by name on import."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from batonsql.models.results import ValidationResult

RuleCheck = Callable[[str, str], ValidationResult]


class RuleScope(StrEnum):
    QUERY = "query"  # inspects one SQL string
    DOCUMENT = "document"  # inspects YAML structure around the SQL


@dataclass(frozen=True)
class ValidationRule:
    """A named heuristic check over ``(normalized_sql, original_query)``.

    A rule reports at most one finding per call. Exceptions escaping
    ``validate`` are absorbed by the engine.
    """

    name: str
    description: str
    check: RuleCheck
    scope: RuleScope = RuleScope.QUERY

    def validate(self, sql: str, original_query: str) -> ValidationResult:
        return self.check(sql, original_query)


class UnknownRuleError(Exception):
    """Raised when a requested rule is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.rule_name = name
        self.available = available
        super().__init__(f"Unknown rule '{name}'. Available: {', '.join(available)}")


class RuleRegistry:
    """Registry of validation rules keyed by name."""

    _rules: dict[str, ValidationRule] = {}

    @classmethod
    def register(cls, rule: ValidationRule) -> ValidationRule:
        if rule.name in cls._rules and cls._rules[rule.name] is not rule:
            raise ValueError(f"Rule '{rule.name}' is already registered")
        cls._rules[rule.name] = rule
        return rule

    @classmethod
    def get(cls, name: str) -> ValidationRule:
        if name not in cls._rules:
            raise UnknownRuleError(name, available=cls.available())
        return cls._rules[name]

    @classmethod
    def available(cls) -> list[str]:
        """List registered rule names."""
        return sorted(cls._rules.keys())


def rule(
    name: str, description: str, *, scope: RuleScope = RuleScope.QUERY
) -> Callable[[RuleCheck], ValidationRule]:
    """Decorator turning a check function into a registered ``ValidationRule``."""

    def decorator(check: RuleCheck) -> ValidationRule:
        return RuleRegistry.register(
            ValidationRule(name=name, description=description, check=check, scope=scope)
        )

    return decorator
