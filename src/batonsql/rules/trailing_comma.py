"""trailing-comma: a comma after the last SELECT column."""

from __future__ import annotations

import re

from batonsql.models.results import Range, TextEdit, ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.lexical import is_comment, next_non_empty, previous_non_empty

_BEFORE_FROM = (
    "Trailing comma found after last column in SELECT statement. "
    "Remove the comma before FROM clause."
)
_BEFORE_CLAUSE = (
    "Trailing comma found after last column in SELECT statement. "
    "Remove the comma before the clause."
)
_BEFORE_NEXT = (
    "Trailing comma found after last column in SELECT statement. "
    "Remove the comma before the next clause."
)
_AT_END = (
    "Trailing comma found after last column in SELECT statement. "
    "Remove the comma at the end of the column list."
)

_TERMINATOR_RE = re.compile(
    r"^(from|where|group\s+by|order\s+by|having|limit|offset|union|except|intersect)\b",
    re.IGNORECASE,
)
_INLINE_FROM_RE = re.compile(r"\sfrom\s", re.IGNORECASE)


def _remove_comma(
    lines: list[str], index: int, message: str, end: int | None = None
) -> ValidationResult:
    text = lines[index] if end is None else lines[index][:end]
    comma = len(text.rstrip()) - 1
    return ValidationResult.fail(
        message,
        line_number=index,
        suggested_fix=TextEdit(range=Range.at(index, comma, comma + 1), new_text=""),
    )


@rule("trailing-comma", "Check for trailing commas after the last column in SELECT statements")
def trailing_comma(sql: str, original_query: str) -> ValidationResult:
    if "," not in original_query:
        return ValidationResult.ok()

    lines = original_query.split("\n")
    in_select = False

    for index, raw in enumerate(lines):
        line = raw.strip()
        if not line or is_comment(line):
            continue
        lower = line.lower()

        if lower.startswith("select"):
            inline_from = _INLINE_FROM_RE.search(raw)
            if inline_from is not None:
                if raw[: inline_from.start()].rstrip().endswith(","):
                    return _remove_comma(lines, index, _BEFORE_FROM, inline_from.start())
                in_select = False
                continue
            in_select = True
            following = next_non_empty(lines, index + 1, skip_comments=True)
            if line.endswith(",") and following and following[1].lower().startswith("from"):
                return _remove_comma(lines, index, _BEFORE_FROM)
            continue

        if not in_select:
            continue

        if _TERMINATOR_RE.match(lower):
            previous = previous_non_empty(lines, index - 1, skip_comments=True)
            if previous is not None and previous[1].endswith(","):
                message = _BEFORE_FROM if lower.startswith("from") else _BEFORE_CLAUSE
                return _remove_comma(lines, previous[0], message)
            in_select = False
            continue

        if line.endswith(","):
            following = next_non_empty(lines, index + 1, skip_comments=True)
            if following is None:
                return _remove_comma(lines, index, _AT_END)
            if _TERMINATOR_RE.match(following[1]):
                return _remove_comma(lines, index, _BEFORE_NEXT)

    return ValidationResult.ok()
