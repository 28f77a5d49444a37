"""baton-parameter-validation: malformed ``?<name>`` parameters."""

from __future__ import annotations

import re

from batonsql.models.results import Range, TextEdit, ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.keywords import COMMON_PARAMETERS, RESERVED_PARAMETER_WORDS
from batonsql.sql.lexical import find_line_with_pattern, offset_to_line, words_similar
from batonsql.sql.normalizer import ParameterToken, find_parameters

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _rename(token: ParameterToken, original_query: str, name: str) -> TextEdit | None:
    lines = original_query.split("\n")
    line = find_line_with_pattern(original_query, token.raw)
    if line is None:
        return None
    column = lines[line].find(token.raw)
    return TextEdit(
        range=Range.at(line, column, column + len(token.raw)), new_text=f"?<{name}>"
    )


def _fail(
    message: str, token: ParameterToken, original_query: str, *, rename_to: str | None = None
) -> ValidationResult:
    line = find_line_with_pattern(original_query, token.raw)
    if line is None:
        line = offset_to_line(original_query, token.offset)
    return ValidationResult.fail(
        message,
        line_number=line,
        suggested_fix=_rename(token, original_query, rename_to) if rename_to else None,
    )


def _check_parameter(token: ParameterToken, original_query: str) -> ValidationResult | None:
    name = token.name.strip()
    if not name:
        return _fail(
            "Empty Baton parameter name. Use format: ?<parameter_name>", token, original_query
        )
    if not _IDENTIFIER_RE.match(name):
        return _fail(
            f"Invalid Baton parameter name '{name}'. Use only letters, numbers, and "
            "underscores. Must start with letter or underscore.",
            token,
            original_query,
        )
    if name.lower() in RESERVED_PARAMETER_WORDS:
        return _fail(
            f"Baton parameter name '{name}' conflicts with SQL keyword. Consider using "
            f"'{name}_value' or '{name}_param'.",
            token,
            original_query,
            rename_to=f"{name}_value",
        )
    if len(name) < 2:
        return _fail(
            f"Baton parameter name '{name}' is too short. Use descriptive names like "
            "'user_id' or 'resource_name'.",
            token,
            original_query,
        )
    lowered = name.lower()
    if lowered not in COMMON_PARAMETERS:
        similar = [param for param in COMMON_PARAMETERS if words_similar(lowered, param, 1)]
        if similar:
            return _fail(
                f"Possible typo in Baton parameter '{name}'. Did you mean '{similar[0]}'?",
                token,
                original_query,
                rename_to=similar[0],
            )
    return None


@rule("baton-parameter-validation", "Validate Baton parameterized query syntax")
def baton_parameter_validation(sql: str, original_query: str) -> ValidationResult:
    # The normalized text no longer carries parameter names.
    for token in find_parameters(original_query):
        result = _check_parameter(token, original_query)
        if result is not None:
            return result
    return ValidationResult.ok()
