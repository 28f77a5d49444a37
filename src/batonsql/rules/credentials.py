"""credential-mutual-exclusion: conflicting credential strategies in one block."""

from __future__ import annotations

import re

from batonsql.models.results import ValidationResult
from batonsql.rules.registry import RuleScope, rule
from batonsql.sql.lexical import indentation

_MESSAGE = (
    "Only one credential strategy is allowed. Choose either 'random_password' "
    "or 'no_password', not both."
)
_CREDENTIALS_RE = re.compile(r"^(?:-\s+)?credentials\s*:", re.IGNORECASE)
_RANDOM_RE = re.compile(r"^(?:-\s+)?random_password\s*:", re.IGNORECASE)
_NONE_RE = re.compile(r"^(?:-\s+)?no_password\s*:", re.IGNORECASE)


@rule(
    "credential-mutual-exclusion",
    "Check for conflicting credential strategies",
    scope=RuleScope.DOCUMENT,
)
def credential_mutual_exclusion(sql: str, original_query: str) -> ValidationResult:
    block_indent: int | None = None
    random_line: int | None = None
    none_line: int | None = None

    for index, line in enumerate(original_query.split("\n")):
        stripped = line.strip()
        if not stripped:
            continue
        if block_indent is not None and indentation(line) <= block_indent:
            block_indent, random_line, none_line = None, None, None
        if _CREDENTIALS_RE.match(stripped):
            block_indent = indentation(line)
            continue
        if block_indent is None:
            continue
        if random_line is None and _RANDOM_RE.match(stripped):
            random_line = index
        if none_line is None and _NONE_RE.match(stripped):
            none_line = index
        if random_line is not None and none_line is not None:
            return ValidationResult.fail(_MESSAGE, line_number=min(random_line, none_line))
    return ValidationResult.ok()
