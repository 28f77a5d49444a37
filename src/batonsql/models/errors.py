"""Structured document-level errors with YAML source positions."""

from __future__ import annotations

from pydantic import BaseModel


class SourceSpan(BaseModel):
    """Points to exact location in YAML source for error reporting."""

    file: str
    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None


class DocumentError(BaseModel):
    """An error that prevented SQL discovery in a document (e.g. broken YAML)."""

    code: str
    message: str
    span: SourceSpan | None = None
