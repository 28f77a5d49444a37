"""Rule results, text edits and editor-facing diagnostics."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class Position(BaseModel):
    """Zero-based line/character coordinate."""

    line: int
    character: int


class Range(BaseModel):
    start: Position
    end: Position

    @classmethod
    def at(cls, line: int, start: int, end: int | None = None) -> Range:
        """Single-line range; an empty (insertion) range when ``end`` is omitted."""
        return cls(
            start=Position(line=line, character=start),
            end=Position(line=line, character=start if end is None else end),
        )


class TextEdit(BaseModel):
    """Mechanical repair expressed in the coordinates of the text that was linted."""

    range: Range
    new_text: str


class ValidationResult(BaseModel):
    """Outcome of one rule invocation.

    ``line_number`` is a zero-based index into ``original_query.split("\\n")``
    and is preferred over ``position`` (a character offset into the scanned
    text) when both are present.
    """

    is_valid: bool
    error_message: str | None = None
    position: int | None = None
    line_number: int | None = None
    suggested_fix: TextEdit | None = None
    rule: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def fail(
        cls,
        message: str,
        *,
        line_number: int | None = None,
        position: int | None = None,
        suggested_fix: TextEdit | None = None,
    ) -> ValidationResult:
        return cls(
            is_valid=False,
            error_message=message,
            line_number=line_number,
            position=position,
            suggested_fix=suggested_fix,
        )


class SQLQueryInfo(BaseModel):
    """A SQL string found in a YAML document.

    Offsets are into the full document text, not the query substring.
    """

    query: str
    yaml_path: list[str] = []
    start_position: int
    end_position: int


class Diagnostic(BaseModel):
    """A user-facing finding in document-absolute coordinates."""

    message: str
    range: Range
    severity: Literal["error", "warning", "information"] = "error"
    source: str = "baton-sql"
    rule: str | None = None
    fix: TextEdit | None = None


class CodeAction(BaseModel):
    """A quick fix offered for one diagnostic."""

    title: str
    kind: str = "quickfix"
    diagnostic: Diagnostic
    edits: dict[str, list[TextEdit]]
