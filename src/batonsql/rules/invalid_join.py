"""invalid-join: JOINs without a join condition."""

from __future__ import annotations

import re
from dataclasses import dataclass

from batonsql.ast import JoinItem, SelectStatement, parse_sql, resolve_strategy
from batonsql.models.results import Range, TextEdit, ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.keywords import JOIN_TYPOS
from batonsql.sql.lexical import indentation

# Lines examined after a JOIN line when looking for its condition.
LOOKAHEAD_LINES = 4

_MISSING_CLAUSE = (
    "{join} statement missing ON clause. Add 'ON table1.column = table2.column' "
    "to specify join condition."
)
_MISSING_KEYWORD = (
    "JOIN statement missing ON keyword. Add 'ON' before the condition on line {line}."
)

_JOIN_WORD_RE = re.compile(r"\b(?:join|" + "|".join(sorted(JOIN_TYPOS)) + r")\b")
_CLAUSE_RE = re.compile(
    r"^(select|from|where|group\s+by|order\s+by|having|limit|union|"
    r"(?:(?:natural|inner|left|right|full|outer|cross)\s+)*join)\b"
)
_ON_RE = re.compile(r"(^|\s)(on|using)(\s|\(|$)")
_QUALIFIED_RE = re.compile(r"[a-z_][a-z0-9_]*\.[a-z_][a-z0-9_]*")
_COMPARISON_RE = re.compile(r"[a-z_][a-z0-9_.]*\s*=\s*[a-z_][a-z0-9_.]*")


@dataclass
class _JoinSite:
    line: int
    exempt: bool
    has_condition: bool = False
    condition_without_on: int | None = None


def _is_condition_without_on(lower: str) -> bool:
    if "=" not in lower or lower.startswith("on "):
        return False
    return bool(_QUALIFIED_RE.search(lower) and _COMPARISON_RE.search(lower))


def _analyze(lines: list[str], index: int, tail: str, site: _JoinSite) -> None:
    """Look for the join condition on the JOIN line and the lines after it."""
    if _ON_RE.search(tail):
        site.has_condition = True
        return

    for ahead in range(index + 1, min(index + 1 + LOOKAHEAD_LINES, len(lines))):
        lower = lines[ahead].strip().lower()
        if not lower:
            continue
        if _CLAUSE_RE.match(lower):
            return
        if _ON_RE.search(lower):
            site.has_condition = True
            return
        if _is_condition_without_on(lower):
            site.condition_without_on = ahead
            return


def _check_lines(original_query: str) -> ValidationResult:
    lines = original_query.split("\n")
    sites: list[_JoinSite] = []
    for index, raw in enumerate(lines):
        lower = raw.strip().lower()
        match = _JOIN_WORD_RE.search(lower)
        if match is None:
            continue
        modifiers = set(lower[: match.start()].split())
        site = _JoinSite(line=index, exempt=bool(modifiers & {"cross", "natural"}))
        _analyze(lines, index, lower[match.end():], site)
        sites.append(site)

    for site in sites:
        if site.exempt:
            continue
        if site.condition_without_on is not None:
            line = site.condition_without_on
            column = indentation(lines[line])
            return ValidationResult.fail(
                _MISSING_KEYWORD.format(line=line + 1),
                line_number=line,
                suggested_fix=TextEdit(range=Range.at(line, column), new_text="ON "),
            )
        if not site.has_condition:
            return ValidationResult.fail(
                _MISSING_CLAUSE.format(join="JOIN"), line_number=site.line
            )
    return ValidationResult.ok()


def _join_line(join: JoinItem, original_query: str) -> int | None:
    lines = original_query.lower().split("\n")
    target = (join.table or join.alias or "").lower()
    if target:
        for index, line in enumerate(lines):
            if "join" in line and re.search(rf"\b{re.escape(target)}\b", line):
                return index
    for index, line in enumerate(lines):
        if "join" in line:
            return index
    return None


@rule("invalid-join", "Check for invalid JOIN syntax")
def invalid_join(sql: str, original_query: str) -> ValidationResult:
    outcome = parse_sql(sql)
    if resolve_strategy(outcome) == "fallback":
        if _JOIN_WORD_RE.search(sql.lower()):
            return _check_lines(original_query)
        return ValidationResult.ok()

    if not isinstance(outcome, SelectStatement):
        return ValidationResult.ok()
    for join in outcome.iter_joins():
        if join.kind.needs_condition and not join.has_condition:
            return ValidationResult.fail(
                _MISSING_CLAUSE.format(join=join.kind.value),
                line_number=_join_line(join, original_query),
            )
    return ValidationResult.ok()
