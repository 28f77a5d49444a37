"""Pydantic domain models for batonsql."""

from batonsql.models.errors import DocumentError, SourceSpan
from batonsql.models.results import (
    CodeAction,
    Diagnostic,
    Position,
    Range,
    SQLQueryInfo,
    TextEdit,
    ValidationResult,
)

__all__ = [
    "CodeAction",
    "Diagnostic",
    "DocumentError",
    "Position",
    "Range",
    "SQLQueryInfo",
    "SourceSpan",
    "TextEdit",
    "ValidationResult",
]
