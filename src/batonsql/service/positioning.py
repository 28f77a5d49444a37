"""Translate rule results into document-absolute diagnostics."""

from __future__ import annotations

from collections.abc import Iterable

from batonsql.models.results import (
    Diagnostic,
    Position,
    Range,
    SQLQueryInfo,
    TextEdit,
    ValidationResult,
)
from batonsql.sql.lexical import indentation

POSITION_HIGHLIGHT_WIDTH = 10


class LineIndex:
    """Offset/line lookups over one document text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.lines = text.split("\n")
        self._starts = [0]
        for line in self.lines[:-1]:
            self._starts.append(self._starts[-1] + len(line) + 1)

    @property
    def last_line(self) -> int:
        return len(self.lines) - 1

    def line_of(self, offset: int) -> int:
        offset = min(max(offset, 0), len(self.text))
        low, high = 0, len(self._starts) - 1
        while low < high:
            mid = (low + high + 1) // 2
            if self._starts[mid] <= offset:
                low = mid
            else:
                high = mid - 1
        return low

    def position_at(self, offset: int) -> Position:
        offset = min(max(offset, 0), len(self.text))
        line = self.line_of(offset)
        return Position(line=line, character=offset - self._starts[line])

    def offset_at(self, position: Position) -> int:
        line = min(max(position.line, 0), self.last_line)
        return min(self._starts[line] + position.character, len(self.text))

    def line_range(self, line: int) -> Range:
        """Whole-line range, clamped to the last line of the document."""
        line = min(max(line, 0), self.last_line)
        return Range.at(line, 0, len(self.lines[line]))


def _column_shift(info: SQLQueryInfo, index: LineIndex, query_line: int) -> int:
    """Column at which line ``query_line`` of the query starts in the document.

    Block scalars lose their indentation when loaded, so continuation lines
    are matched against the document text rather than assumed to start at 0.
    """
    base = index.position_at(info.start_position)
    if query_line == 0:
        return base.character
    doc_line = base.line + query_line
    if doc_line > index.last_line:
        return 0
    text = index.lines[doc_line]
    query_lines = info.query.split("\n")
    source = query_lines[query_line] if query_line < len(query_lines) else ""
    if source.strip():
        column = text.find(source)
        if column >= 0:
            return column
    return max(indentation(text) - indentation(source), 0)


def _to_document(info: SQLQueryInfo, index: LineIndex, position: Position) -> Position:
    base_line = index.line_of(info.start_position)
    line = min(base_line + position.line, index.last_line)
    return Position(
        line=line, character=_column_shift(info, index, position.line) + position.character
    )


def _translate_fix(fix: TextEdit, info: SQLQueryInfo, index: LineIndex) -> TextEdit:
    return TextEdit(
        range=Range(
            start=_to_document(info, index, fix.range.start),
            end=_to_document(info, index, fix.range.end),
        ),
        new_text=fix.new_text,
    )


def query_position(info: SQLQueryInfo, index: LineIndex, offset: int) -> Position:
    """Map a character offset into the query to a document position."""
    before = info.query[:offset]
    line = before.count("\n")
    character = len(before) - (before.rfind("\n") + 1)
    return _to_document(info, index, Position(line=line, character=character))


def to_diagnostic(result: ValidationResult, info: SQLQueryInfo, index: LineIndex) -> Diagnostic:
    """Build the diagnostic for a failed result found in ``info``.

    ``line_number`` wins over ``position``; with neither the whole query
    span is highlighted.
    """
    if result.line_number is not None:
        base_line = index.line_of(info.start_position)
        span = index.line_range(base_line + result.line_number)
    elif result.position is not None:
        start = query_position(info, index, result.position)
        end = index.position_at(index.offset_at(start) + POSITION_HIGHLIGHT_WIDTH)
        span = Range(start=start, end=end)
    else:
        span = Range(
            start=index.position_at(info.start_position),
            end=index.position_at(info.end_position),
        )

    fix = _translate_fix(result.suggested_fix, info, index) if result.suggested_fix else None
    return Diagnostic(
        message=result.error_message or f"Validation failed for rule: {result.rule}",
        range=span,
        rule=result.rule,
        fix=fix,
    )


def document_diagnostic(result: ValidationResult, index: LineIndex) -> Diagnostic:
    """Diagnostic for a result computed over the whole document text."""
    whole = SQLQueryInfo(query=index.text, start_position=0, end_position=len(index.text))
    return to_diagnostic(result, whole, index)


def dedupe(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Keep the first diagnostic per (message, start line, start character)."""
    seen: set[tuple[str, int, int]] = set()
    unique: list[Diagnostic] = []
    for diagnostic in diagnostics:
        key = (diagnostic.message, diagnostic.range.start.line, diagnostic.range.start.character)
        if key in seen:
            continue
        seen.add(key)
        unique.append(diagnostic)
    return unique
