"""missing-from: SELECT statements without a FROM clause."""

from __future__ import annotations

import re

from batonsql.ast import OtherStatement, SelectStatement, parse_sql
from batonsql.models.results import Range, TextEdit, ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.lexical import find_line_with_pattern

_MESSAGE = (
    "Missing FROM clause in SELECT statement. Add FROM clause or use "
    "system functions/literals if querying constants."
)

_LITERAL_RE = re.compile(r"^select\s+[\d'\"]")
_ARITHMETIC_RE = re.compile(r"^select\s+[\d\s+\-*/().]+$")
_VARIABLE_RE = re.compile(r"^select\s+[@$]\w+")
_SYSTEM_WORDS_RE = re.compile(
    r"\b(current_date|current_time|current_timestamp|localtime|localtimestamp|"
    r"sysdate|user|session_user|current_user|current_schema)\b"
)
_SYSTEM_CALLS = (
    "now(", "getdate(", "database(", "version(", "connection_id(", "last_insert_id(",
    "row_count(", "found_rows(", "uuid(", "gen_random_uuid(", "rand(", "random(", "pi(",
    "abs(", "ceil(", "floor(", "round(", "sqrt(", "power(", "mod(", "length(", "upper(",
    "lower(", "trim(", "ltrim(", "rtrim(", "substring(", "concat(", "coalesce(",
    "nullif(", "greatest(", "least(",
)
_CASE_WHEN_RE = re.compile(r"\bcase\s+when\b")


def is_valid_select_without_from(sql: str) -> bool:
    """Literal, arithmetic, system-function and session-variable selects need no FROM."""
    content = sql.lower().strip()
    if _LITERAL_RE.match(content) or _ARITHMETIC_RE.match(content):
        return True
    if _VARIABLE_RE.match(content):
        return True
    if _SYSTEM_WORDS_RE.search(content) or _CASE_WHEN_RE.search(content):
        return True
    compact = re.sub(r"\s+\(", "(", content)
    return any(call in compact for call in _SYSTEM_CALLS)


def _missing_from(original_query: str) -> ValidationResult:
    lines = original_query.split("\n")
    last = len(lines) - 1
    return ValidationResult.fail(
        _MESSAGE,
        line_number=find_line_with_pattern(original_query, "select", ignore_case=True),
        suggested_fix=TextEdit(
            range=Range.at(last, len(lines[last])), new_text="\nFROM table_name"
        ),
    )


@rule("missing-from", "Check for missing FROM clause in SELECT statements")
def missing_from(sql: str, original_query: str) -> ValidationResult:
    outcome = parse_sql(sql)
    match outcome:
        case SelectStatement(from_items=()):
            if is_valid_select_without_from(sql):
                return ValidationResult.ok()
            return _missing_from(original_query)
        case SelectStatement() | OtherStatement():
            return ValidationResult.ok()

    lowered = sql.lower().strip()
    if lowered.startswith("select") and not re.search(r"\bfrom\b", lowered):
        if is_valid_select_without_from(sql):
            return ValidationResult.ok()
        return _missing_from(original_query)
    return ValidationResult.ok()
