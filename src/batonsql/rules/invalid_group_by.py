"""invalid-group-by: aggregates mixed with plain columns without GROUP BY."""

from __future__ import annotations

import re

from batonsql.ast import AggregateCall, ColumnRef, ParseFailure, SelectStatement, parse_sql
from batonsql.models.results import ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.lexical import split_top_level

_MESSAGE = (
    "Mixing aggregate functions with non-aggregated columns requires GROUP BY. "
    "Add 'GROUP BY column_name' or use only aggregate functions."
)

_AGGREGATE_RE = re.compile(
    r"\b(count|sum|avg|min|max|group_concat|string_agg|array_agg)\s*\(", re.IGNORECASE
)
_COUNT_STAR_RE = re.compile(r"^count\s*\(\s*\*\s*\)$", re.IGNORECASE)
_GROUP_BY_RE = re.compile(r"\bgroup\s+by\b", re.IGNORECASE)
_SELECT_RE = re.compile(r"\bselect\b", re.IGNORECASE)
_FROM_RE = re.compile(r"\bfrom\b", re.IGNORECASE)


def _select_line(original_query: str) -> int | None:
    for index, line in enumerate(original_query.split("\n")):
        if line.strip().lower().startswith("select"):
            return index
    return None


def _fail(sql: str, original_query: str) -> ValidationResult:
    line = _select_line(original_query)
    if line is not None:
        return ValidationResult.fail(_MESSAGE, line_number=line)
    select = _SELECT_RE.search(sql)
    return ValidationResult.fail(_MESSAGE, position=select.start() if select else 0)


def _check_statement(statement: SelectStatement, sql: str, original_query: str) -> ValidationResult:
    if statement.has_group_by:
        return ValidationResult.ok()
    has_aggregates = any(isinstance(col, AggregateCall) for col in statement.columns)
    has_plain = any(isinstance(col, ColumnRef) for col in statement.columns)
    if has_aggregates and has_plain:
        return _fail(sql, original_query)
    return ValidationResult.ok()


def _check_text(sql: str, original_query: str) -> ValidationResult:
    if _GROUP_BY_RE.search(sql) or not _AGGREGATE_RE.search(sql):
        return ValidationResult.ok()
    select = _SELECT_RE.search(sql)
    if select is None:
        return ValidationResult.ok()
    end = _FROM_RE.search(sql, select.end())
    select_list = sql[select.end(): end.start() if end else len(sql)]
    columns = [col.strip() for col in split_top_level(select_list) if col.strip()]
    if all(_COUNT_STAR_RE.match(col) for col in columns):
        return ValidationResult.ok()
    if any(not _AGGREGATE_RE.search(col) for col in columns):
        return _fail(sql, original_query)
    return ValidationResult.ok()


@rule("invalid-group-by", "Check for aggregate functions without GROUP BY")
def invalid_group_by(sql: str, original_query: str) -> ValidationResult:
    outcome = parse_sql(sql)
    if isinstance(outcome, ParseFailure):
        return _check_text(sql, original_query)
    if isinstance(outcome, SelectStatement):
        return _check_statement(outcome, sql, original_query)
    return ValidationResult.ok()
