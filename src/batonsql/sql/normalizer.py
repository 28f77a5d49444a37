"""Baton named-parameter handling.

Baton SQL queries bind values with ``?<name>`` tokens. SQL parsers reject
them, so rules parse a normalized copy where each token becomes a plain
``?`` placeholder. Normalization never touches newlines, so zero-based line
numbers computed on either text agree; character offsets do not.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_NAMED_PARAMETER_RE = re.compile(r"\?<[^>]+>")
# Lenient variant used for diagnostics: also captures ``?<>``.
_PARAMETER_TOKEN_RE = re.compile(r"\?<([^>]*)>")


@dataclass(frozen=True)
class ParameterToken:
    """A ``?<name>`` occurrence in the original query text."""

    name: str
    offset: int
    raw: str


def normalize_sql(sql: str) -> str:
    """Replace every ``?<name>`` token with ``?``. Idempotent."""
    return _NAMED_PARAMETER_RE.sub("?", sql)


def find_parameters(text: str) -> list[ParameterToken]:
    """All parameter tokens in ``text``, in order of appearance."""
    return [
        ParameterToken(name=match.group(1), offset=match.start(), raw=match.group(0))
        for match in _PARAMETER_TOKEN_RE.finditer(text)
    ]
