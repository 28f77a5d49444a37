"""invalid-order-by: positional ``ORDER BY 1`` (portability advice)."""

from __future__ import annotations

import re

from batonsql.models.results import ValidationResult
from batonsql.rules.registry import rule

_MESSAGE = (
    "Using position numbers in ORDER BY is not supported in some SQL dialects. "
    "Use column names instead: 'ORDER BY column_name ASC/DESC'."
)
_POSITIONAL_RE = re.compile(r"\border\s+by\s+(\d+)\b", re.IGNORECASE)


@rule("invalid-order-by", "Check for invalid ORDER BY references")
def invalid_order_by(sql: str, original_query: str) -> ValidationResult:
    match = _POSITIONAL_RE.search(sql)
    if match is None:
        return ValidationResult.ok()
    if "\n" in original_query:
        for index, line in enumerate(original_query.split("\n")):
            if _POSITIONAL_RE.search(line):
                return ValidationResult.fail(_MESSAGE, line_number=index)
    return ValidationResult.fail(_MESSAGE, position=match.start())
