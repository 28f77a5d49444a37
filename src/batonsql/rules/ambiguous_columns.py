"""ambiguous-columns: ``SELECT *`` over more than one table."""

from __future__ import annotations

import re

from batonsql.ast import ParseFailure, SelectStatement, parse_sql
from batonsql.models.results import ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.lexical import find_line_with_pattern

_FALLBACK_MESSAGE = (
    "Using * with multiple tables can lead to ambiguous columns. Specify column "
    "names explicitly or use table prefixes."
)

_FROM_TABLE_RE = re.compile(r"\bfrom\s+\w+", re.IGNORECASE)
_JOIN_TABLE_RE = re.compile(r"\bjoin\s+\w+", re.IGNORECASE)
_FROM_RE = re.compile(r"\bfrom\b", re.IGNORECASE)
_SELECT_STAR_RE = re.compile(r"\bselect\s+(?:distinct\s+)?\*", re.IGNORECASE)


def _star_line(original_query: str) -> int | None:
    for index, line in enumerate(original_query.split("\n")):
        if _SELECT_STAR_RE.search(line):
            return index
    return find_line_with_pattern(original_query, "select", ignore_case=True)


def _check_statement(statement: SelectStatement, original_query: str) -> ValidationResult:
    sources = (*statement.from_items, *statement.joins)
    if len(sources) <= 1 or not statement.has_star:
        return ValidationResult.ok()
    tables = ", ".join(source.binding for source in sources if source.binding)
    return ValidationResult.fail(
        f"Using * with multiple tables ({tables}) can lead to ambiguous columns. "
        "Specify column names explicitly or use table prefixes like "
        "'table1.*, table2.column_name'.",
        line_number=_star_line(original_query),
    )


def _check_text(sql: str, original_query: str) -> ValidationResult:
    if not (_FROM_TABLE_RE.search(sql) and _JOIN_TABLE_RE.search(sql)):
        return ValidationResult.ok()
    from_match = _FROM_RE.search(sql)
    select_clause = sql[: from_match.start()] if from_match else sql
    star = _SELECT_STAR_RE.search(select_clause)
    if star is None:
        return ValidationResult.ok()
    if "\n" in original_query:
        return ValidationResult.fail(_FALLBACK_MESSAGE, line_number=_star_line(original_query))
    return ValidationResult.fail(_FALLBACK_MESSAGE, position=star.start())


@rule("ambiguous-columns", "Check for potentially ambiguous column references")
def ambiguous_columns(sql: str, original_query: str) -> ValidationResult:
    outcome = parse_sql(sql)
    if isinstance(outcome, ParseFailure):
        return _check_text(sql, original_query)
    if isinstance(outcome, SelectStatement):
        return _check_statement(outcome, original_query)
    return ValidationResult.ok()
