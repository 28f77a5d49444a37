"""unconventional-sql-syntax: PostgreSQL extension pitfalls.

Each probe is independent and informational; the first probe that fires
wins. Offsets are taken on the original query so they map to its lines.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from batonsql.models.results import ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.lexical import call_arguments, offset_to_line

_ON_CONFLICT_RE = re.compile(r"\bon\s+conflict\b", re.IGNORECASE)
_CONFLICT_ACTION_RE = re.compile(
    r"\s*(?:\([^)]*\))?\s*(?:on\s+constraint\s+\w+)?\s*(?:where\s+[^;]*?)?"
    r"\s*do\s+(?:nothing|update)\b",
    re.IGNORECASE,
)
_RETURNING_END_RE = re.compile(r"\breturning\s*;?\s*$", re.IGNORECASE)
_COALESCE_RE = re.compile(r"\bcoalesce\s*\(", re.IGNORECASE)
_DATE_LITERAL_RE = re.compile(r"\bdate\s+'([^']*)'", re.IGNORECASE)
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INTERVAL_RE = re.compile(r"\binterval\s+'([^']*)'(?:\s+([a-z]+))?", re.IGNORECASE)
_INTERVAL_UNITS = frozenset({
    "microsecond", "millisecond", "second", "minute", "hour", "day", "week",
    "month", "quarter", "year", "decade", "century", "millennium",
})
_GEN_SALT_EMPTY_RE = re.compile(r"\bgen_salt\s*\(\s*\)", re.IGNORECASE)
_CRYPT_RE = re.compile(r"\bcrypt\s*\(", re.IGNORECASE)

Probe = Callable[[str], ValidationResult | None]


def _at(text: str, offset: int, message: str) -> ValidationResult:
    return ValidationResult.fail(message, line_number=offset_to_line(text, offset))


def _on_conflict(text: str) -> ValidationResult | None:
    for match in _ON_CONFLICT_RE.finditer(text):
        if not _CONFLICT_ACTION_RE.match(text, match.end()):
            return _at(
                text,
                match.start(),
                "ON CONFLICT clause requires either 'DO NOTHING' or 'DO UPDATE SET ...' "
                "after it.",
            )
    return None


def _bare_returning(text: str) -> ValidationResult | None:
    match = _RETURNING_END_RE.search(text.rstrip())
    if match is None:
        return None
    return _at(
        text,
        match.start(),
        "RETURNING clause requires column names after it (e.g., RETURNING id, name).",
    )


def _single_argument_coalesce(text: str) -> ValidationResult | None:
    for match in _COALESCE_RE.finditer(text):
        arguments = call_arguments(text, match.end() - 1)
        if arguments is not None and len(arguments) < 2:
            return _at(
                text,
                match.start(),
                "COALESCE function requires at least 2 arguments to be useful. "
                "Use COALESCE(column, default_value).",
            )
    return None


def _date_literal(text: str) -> ValidationResult | None:
    for match in _DATE_LITERAL_RE.finditer(text):
        value = match.group(1)
        if not _ISO_DATE_RE.match(value):
            return _at(
                text,
                match.start(),
                f"DATE literal '{value}' should be in YYYY-MM-DD format "
                "(e.g., DATE '2024-01-01').",
            )
    return None


def _unitless_interval(text: str) -> ValidationResult | None:
    for match in _INTERVAL_RE.finditer(text):
        value, unit = match.group(1), (match.group(2) or "").lower()
        if any(char.isalpha() for char in value):
            continue
        if unit.rstrip("s") in _INTERVAL_UNITS:
            continue
        return _at(
            text,
            match.start(),
            "INTERVAL requires a time unit after the value "
            "(e.g., INTERVAL '1 day' or INTERVAL '1' DAY).",
        )
    return None


def _empty_gen_salt(text: str) -> ValidationResult | None:
    match = _GEN_SALT_EMPTY_RE.search(text)
    if match is None:
        return None
    return _at(
        text,
        match.start(),
        "gen_salt() requires an algorithm parameter (e.g., gen_salt('bf') for "
        "Blowfish or gen_salt('md5')).",
    )


def _crypt_arity(text: str) -> ValidationResult | None:
    for match in _CRYPT_RE.finditer(text):
        arguments = call_arguments(text, match.end() - 1)
        if arguments is not None and len(arguments) != 2:
            return _at(
                text,
                match.start(),
                "crypt() requires exactly 2 arguments: crypt(password, gen_salt('algorithm')).",
            )
    return None


PROBES: tuple[Probe, ...] = (
    _on_conflict,
    _bare_returning,
    _single_argument_coalesce,
    _date_literal,
    _unitless_interval,
    _empty_gen_salt,
    _crypt_arity,
)


@rule(
    "unconventional-sql-syntax",
    "Validate PostgreSQL-specific and unconventional SQL syntax",
)
def unconventional_sql_syntax(sql: str, original_query: str) -> ValidationResult:
    for probe in PROBES:
        result = probe(original_query)
        if result is not None:
            return result
    return ValidationResult.ok()
