"""Find SQL strings in a parsed Baton YAML document and locate them in the text.

Position strategies, in order:

1. direct match of the string, searched from the line ruamel recorded for
   the value (so a query repeated elsewhere maps to its own occurrence);
2. line search for the query's first non-empty line;
3. path-aware search under the last key of the YAML path.

Block scalars (``query: |``) are stored with their indentation removed, so
(1) only succeeds for single-line values; (2) covers the common multi-line
case.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from batonsql.models.results import SQLQueryInfo
from batonsql.parser.loader import LoadedDocument, key_path
from batonsql.sql.lexical import indentation

logger = logging.getLogger("batonsql.parser")

DEFAULT_SQL_FIELDS: tuple[str, ...] = ("query", "sql", "statement")
_SQL_MARKERS = ("SELECT", "INSERT", "UPDATE", "DELETE")


def is_sql_field(name: str, value: str, field_names: Iterable[str] = DEFAULT_SQL_FIELDS) -> bool:
    """A string is SQL when its key says so or it contains a DML keyword."""
    if name.lower() in {field.lower() for field in field_names}:
        return True
    return any(marker in value for marker in _SQL_MARKERS)


def _line_offsets(text: str) -> list[int]:
    offsets = [0]
    for line in text.split("\n"):
        offsets.append(offsets[-1] + len(line) + 1)
    return offsets


def _by_direct_match(text: str, query: str, from_offset: int) -> tuple[int, int] | None:
    index = text.find(query, from_offset)
    if index < 0 and from_offset:
        index = text.find(query)
    if index < 0:
        return None
    return index, index + len(query)


def _by_line_search(
    lines: list[str], offsets: list[int], query: str, from_line: int
) -> tuple[int, int] | None:
    query_lines = [line for line in query.split("\n") if line.strip()]
    if not query_lines:
        return None
    first = query_lines[0].strip()
    order = [*range(from_line, len(lines)), *range(0, from_line)]
    for index in order:
        column = lines[index].find(first)
        if column < 0:
            continue
        start = offsets[index] + column
        last = min(index + len(query.rstrip("\n").split("\n")) - 1, len(lines) - 1)
        return start, offsets[last] + len(lines[last])
    return None


def _by_yaml_path(
    lines: list[str], offsets: list[int], query: str, yaml_path: list[str]
) -> tuple[int, int] | None:
    names = [part for part in yaml_path if not part.startswith("[")]
    probe = next((line.strip() for line in query.split("\n") if line.strip()), "")[:50]
    if not names or not probe:
        return None
    target = f"{names[-1]}:"
    section_indent: int | None = None
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if target in stripped:
            section_indent = indentation(line)
        elif section_indent is not None and indentation(line) <= section_indent:
            section_indent = None
        if section_indent is None:
            continue
        column = line.find(probe)
        if column >= 0:
            return offsets[index] + column, offsets[index] + len(line)
    return None


def locate_query(
    text: str, query: str, yaml_path: list[str], value_line: int | None = None
) -> SQLQueryInfo | None:
    """Compute the document span of ``query``; None when it cannot be found."""
    lines = text.split("\n")
    offsets = _line_offsets(text)
    from_line = min(max(value_line or 0, 0), len(lines) - 1)

    span = (
        _by_direct_match(text, query, offsets[from_line])
        or _by_line_search(lines, offsets, query, from_line)
        or _by_yaml_path(lines, offsets, query, yaml_path)
    )
    if span is None:
        return None
    start, end = span
    return SQLQueryInfo(query=query, yaml_path=yaml_path, start_position=start, end_position=end)


def find_sql_queries(
    text: str,
    document: LoadedDocument,
    field_names: Iterable[str] = DEFAULT_SQL_FIELDS,
) -> list[SQLQueryInfo]:
    """Walk the YAML tree and return every SQL-looking string with its span."""
    fields = tuple(field_names)
    found: list[SQLQueryInfo] = []

    def visit(node: Any, path: list[str]) -> None:
        if isinstance(node, dict):
            for key, value in node.items():
                child = [*path, str(key)]
                if isinstance(value, str):
                    if is_sql_field(str(key), value, fields):
                        _add(value, child)
                else:
                    visit(value, child)
        elif isinstance(node, list):
            for index, item in enumerate(node):
                visit(item, [*path, f"[{index}]"])

    def _add(value: str, path: list[str]) -> None:
        span = document.source_map.get_value(key_path(path))
        value_line = span.line - 1 if span is not None else None
        info = locate_query(text, value, path, value_line)
        if info is None:
            logger.debug("Could not locate SQL at %s", key_path(path))
            return
        found.append(info)

    visit(document.data, [])
    return found
