"""unclosed-parentheses: surfaces the parser's own parenthesis errors."""

from __future__ import annotations

import re

from batonsql.ast import ParseFailure, parse_sql
from batonsql.models.results import ValidationResult
from batonsql.rules.registry import rule

# sqlglot reports a missing ")" as "Expecting )".
_PAREN_ERROR_RE = re.compile(r"parenthes|expecting\s*[()]", re.IGNORECASE)


def is_parenthesis_error(failure: ParseFailure) -> bool:
    return any(_PAREN_ERROR_RE.search(text) for text in (failure.message, *failure.details))


@rule("unclosed-parentheses", "Check for unclosed parentheses")
def unclosed_parentheses(sql: str, original_query: str) -> ValidationResult:
    outcome = parse_sql(sql)
    if not isinstance(outcome, ParseFailure) or not is_parenthesis_error(outcome):
        return ValidationResult.ok()
    line = outcome.line if outcome.line is not None else original_query.count("\n")
    return ValidationResult.fail(
        f"{outcome.message}. Check that all opening parentheses '(' have matching "
        "closing parentheses ')'.",
        line_number=line,
    )
