"""vars-query-mismatch: ``vars:`` entries vs ``?<name>`` usage."""

from __future__ import annotations

import re

from batonsql.models.results import ValidationResult
from batonsql.rules.registry import RuleScope, rule
from batonsql.sql.lexical import indentation
from batonsql.sql.normalizer import find_parameters

_VAR_ENTRY_RE = re.compile(r"^(\w+):\s*\S")
_YAML_KEY_RE = re.compile(r"^\s*(?:-\s+)?[A-Za-z_][\w-]*:(?:\s|$)")


def _declared_vars(lines: list[str]) -> tuple[list[str], int | None]:
    """Names declared in every ``vars:`` block and the line of the first block."""
    declared: list[str] = []
    first_block: int | None = None
    block_indent: int | None = None
    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped == "vars:":
            block_indent = indentation(line)
            if first_block is None:
                first_block = index
            continue
        if block_indent is None or not stripped:
            continue
        if indentation(line) <= block_indent:
            block_indent = None
            continue
        match = _VAR_ENTRY_RE.match(stripped)
        if match and match.group(1) not in declared:
            declared.append(match.group(1))
    return declared, first_block


@rule(
    "vars-query-mismatch",
    "Check for mismatches between vars definitions and query parameter usage",
    scope=RuleScope.DOCUMENT,
)
def vars_query_mismatch(sql: str, original_query: str) -> ValidationResult:
    used: list[str] = []
    for token in find_parameters(original_query):
        if re.fullmatch(r"\w+", token.name) and token.name not in used:
            used.append(token.name)
    if not used:
        return ValidationResult.ok()

    lines = original_query.split("\n")
    declared, vars_line = _declared_vars(lines)
    # A bare SQL string carries no YAML context to compare against.
    if vars_line is None and not any(_YAML_KEY_RE.match(line) for line in lines):
        return ValidationResult.ok()

    unused = [name for name in declared if name not in used]
    if unused and vars_line is not None:
        return ValidationResult.fail(
            f"Variable(s) defined in 'vars' but not used in query: {', '.join(unused)}. "
            f"Either use them in the query with ?<{unused[0]}> or remove them from vars.",
            line_number=vars_line,
        )

    undefined = [name for name in used if name not in declared]
    if undefined:
        name = undefined[0]
        line = next(
            (index for index, text in enumerate(lines) if f"?<{name}>" in text), 0
        )
        return ValidationResult.fail(
            f"Query uses parameter ?<{name}> but it's not defined in 'vars'. "
            f"Add '{name}: <value>' to the vars block.",
            line_number=line,
        )
    return ValidationResult.ok()
