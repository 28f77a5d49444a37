"""duplicate-aliases: the same table alias bound twice in one FROM scope."""

from __future__ import annotations

import re

from batonsql.ast import ParseFailure, SelectStatement, parse_sql
from batonsql.models.results import ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.lexical import find_line_with_pattern, offset_to_line

_BINDING_RE = re.compile(
    r"\b(?:from|join)\s+[\w.\"`]+\s+(?:as\s+)?(\w+)", re.IGNORECASE
)
# Words that can follow a table name without being its alias.
_NOT_ALIASES = frozenset({
    "on", "using", "where", "join", "inner", "left", "right", "full", "outer",
    "cross", "natural", "group", "order", "having", "limit", "offset", "union",
    "except", "intersect", "set", "values", "returning", "window", "for", "lateral",
})


def _message(alias: str) -> str:
    return (
        f"Duplicate table alias: {alias}. Each table must have a unique alias. "
        f"Use different names like '{alias}1', '{alias}2' or descriptive names."
    )


def _bindings(text: str) -> list[tuple[str, int]]:
    """``(alias, offset)`` for every ``FROM/JOIN table alias`` in ``text``."""
    found = []
    for match in _BINDING_RE.finditer(text):
        alias = match.group(1).lower()
        if alias not in _NOT_ALIASES:
            found.append((alias, match.start(1)))
    return found


def _second_binding_line(alias: str, original_query: str) -> int | None:
    seen = 0
    for name, offset in _bindings(original_query):
        if name == alias:
            seen += 1
            if seen == 2:
                return offset_to_line(original_query, offset)
    return find_line_with_pattern(original_query, alias, ignore_case=True)


def _first_duplicate(statement: SelectStatement) -> str | None:
    aliases: set[str] = set()
    for source in (*statement.from_items, *statement.joins):
        if source.alias:
            alias = source.alias.lower()
            if alias in aliases:
                return alias
            aliases.add(alias)
    # Subqueries are their own alias scope.
    for source in (*statement.from_items, *statement.joins):
        if source.subquery is not None:
            duplicate = _first_duplicate(source.subquery)
            if duplicate is not None:
                return duplicate
    return None


@rule("duplicate-aliases", "Check for duplicate table aliases")
def duplicate_aliases(sql: str, original_query: str) -> ValidationResult:
    outcome = parse_sql(sql)
    if isinstance(outcome, SelectStatement):
        alias = _first_duplicate(outcome)
        if alias is None:
            return ValidationResult.ok()
        return ValidationResult.fail(
            _message(alias), line_number=_second_binding_line(alias, original_query)
        )
    if not isinstance(outcome, ParseFailure):
        return ValidationResult.ok()

    seen: set[str] = set()
    for alias, offset in _bindings(original_query):
        if alias in seen:
            return ValidationResult.fail(
                _message(alias), line_number=offset_to_line(original_query, offset)
            )
        seen.add(alias)
    return ValidationResult.ok()
