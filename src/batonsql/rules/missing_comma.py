"""missing-comma: omitted separators in SELECT lists, INSERT lists and UPDATE SET."""

from __future__ import annotations

import re

from batonsql.ast import SelectStatement, parse_sql
from batonsql.models.results import Range, TextEdit, ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.lexical import first_word, next_non_empty, words_similar

# Near-spellings of FROM up to this distance mark the previous line as the last column.
FROM_MAX_DISTANCE = 2

_FROM_RE = re.compile(r"^from\b", re.IGNORECASE)

_CONTINUATION_RE = re.compile(
    r"^(when|then|else|end|and|or|where|group|order|having|limit|offset|on|as)\b|^\)",
    re.IGNORECASE,
)
_CASE_ONLY_RE = re.compile(r"^(when|then|else|case)$", re.IGNORECASE)
_SET_RE = re.compile(r"\bset\b", re.IGNORECASE)
_SET_END_RE = re.compile(r"^(where|from|returning)\b", re.IGNORECASE)
_VALUES_RE = re.compile(r"\bvalues\b", re.IGNORECASE)

_SELECT_MESSAGE = (
    "Missing comma between column expressions. Add a comma at the end of this line "
    "to separate columns in SELECT statement."
)
_LIST_MESSAGE = "Missing comma between items in list. Add a comma at the end of this line."
_SET_MESSAGE = "Missing comma between SET assignments. Add a comma at the end of this line."


def _missing_comma(lines: list[str], index: int, message: str) -> ValidationResult:
    end = len(lines[index].rstrip())
    return ValidationResult.fail(
        message,
        line_number=index,
        suggested_fix=TextEdit(range=Range.at(index, end), new_text=","),
    )


def _looks_like_from(text: str) -> bool:
    word = first_word(text).upper()
    return word == "FROM" or words_similar(word, "FROM", FROM_MAX_DISTANCE)


def _is_yaml_line(line: str) -> bool:
    return ":" in line and "::" not in line


def _check_parenthesized_list(
    lines: list[str], start: int, column: int = 0
) -> ValidationResult | None:
    """Scan a ``( a, b, c )`` list beginning at ``lines[start][column:]``."""
    depth = 0
    needs_comma = False
    previous = -1
    for index in range(start, len(lines)):
        raw = lines[index][column:] if index == start else lines[index]
        line = raw.strip()
        if not line:
            continue
        closed = False
        for char in line:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth <= 0:
                    closed = True
                    break
        if _is_yaml_line(line):
            continue
        if needs_comma and not lines[previous].rstrip().endswith(","):
            return _missing_comma(lines, previous, _LIST_MESSAGE)
        if closed:
            return None
        following = next_non_empty(lines, index + 1)
        is_last_item = following is None or ")" in following[1]
        needs_comma = depth > 0 and not is_last_item and not line.endswith("(")
        previous = index
    return None


def _check_insert(lines: list[str], start: int) -> ValidationResult | None:
    paren = lines[start].find("(")
    error = _check_parenthesized_list(lines, start, max(paren, 0))
    if error is not None:
        return error
    for index in range(start, len(lines)):
        match = _VALUES_RE.search(lines[index])
        if match is not None:
            return _check_parenthesized_list(lines, index, match.end())
    return None


def _check_update(lines: list[str], start: int) -> ValidationResult | None:
    for set_index in range(start, len(lines)):
        match = _SET_RE.search(lines[set_index])
        if match is None:
            continue
        needs_comma = False
        previous = -1
        for index in range(set_index, len(lines)):
            raw = lines[index][match.end():] if index == set_index else lines[index]
            line = raw.strip()
            if not line:
                continue
            if _SET_END_RE.match(line):
                break
            if needs_comma and not lines[previous].rstrip().endswith(","):
                return _missing_comma(lines, previous, _SET_MESSAGE)
            following = next_non_empty(lines, index + 1)
            is_last = following is None or _SET_END_RE.match(following[1]) is not None
            needs_comma = not is_last and "=" in line
            previous = index
        return None
    return None


def _aliases_are_explicit(statement: SelectStatement, original_query: str) -> bool:
    """True when every projection alias was written with AS.

    ``name\\n email`` parses cleanly as ``name AS email``, hiding the comma.
    """
    for alias in statement.aliases:
        pattern = rf"\bas\s+[\"`\[]?{re.escape(alias)}\b"
        if re.search(pattern, original_query, re.IGNORECASE) is None:
            return False
    return True


def _check_select(lines: list[str]) -> ValidationResult | None:
    in_select = False
    needs_comma = False
    previous = -1
    case_depth = 0

    for index, raw in enumerate(lines):
        line = raw.strip()
        if not line:
            continue
        lower = line.lower()

        if lower.startswith("select"):
            if re.search(r"\bfrom\b", lower):
                in_select = False
                continue
            in_select = True
            remainder = lower[len("select"):].strip()
            if remainder in ("", "distinct"):
                continue
            line = line[len("select"):].strip()
            lower = remainder
        elif in_select and _FROM_RE.match(line):
            return None

        if not in_select:
            continue

        # Approximate CASE ... END tracking by substring.
        if "case" in lower:
            case_depth += 1
        if "end" in lower and case_depth > 0:
            case_depth -= 1

        if (
            needs_comma
            and not lines[previous].rstrip().endswith(",")
            and case_depth == 0
            and not _CONTINUATION_RE.match(lower)
        ):
            return _missing_comma(lines, previous, _SELECT_MESSAGE)

        following = next_non_empty(lines, index + 1)
        is_last_column = following is not None and _looks_like_from(following[1])
        needs_comma = (
            not is_last_column
            and case_depth == 0
            and not _CASE_ONLY_RE.match(lower)
            and not line.endswith("(")
        )
        previous = index
    return None


@rule("missing-comma", "Check for missing commas in column lists, VALUES, and SET clauses")
def missing_comma(sql: str, original_query: str) -> ValidationResult:
    lines = original_query.split("\n")

    for index, raw in enumerate(lines):
        lower = raw.strip().lower()
        if lower.startswith("insert into"):
            error = _check_insert(lines, index)
        elif lower.startswith("update"):
            error = _check_update(lines, index)
        else:
            continue
        if error is not None:
            return error

    outcome = parse_sql(sql)
    if isinstance(outcome, SelectStatement) and _aliases_are_explicit(outcome, original_query):
        return ValidationResult.ok()

    return _check_select(lines) or ValidationResult.ok()
