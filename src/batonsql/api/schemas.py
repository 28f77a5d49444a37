"""API request/response Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from batonsql.models.errors import DocumentError
from batonsql.models.results import CodeAction, Diagnostic, Position, Range, ValidationResult


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = ""


class RuleInfo(BaseModel):
    name: str
    description: str
    scope: str


class RuleListResponse(BaseModel):
    """Response for GET /rules."""

    dialect: str
    rules: list[RuleInfo] = []


class QueryValidateRequest(BaseModel):
    """Request body for POST /validate/query."""

    query: str = Field(description="SQL text as written, with ?<name> parameters")
    original_query: str | None = Field(
        default=None, description="Text that line numbers refer to; defaults to query"
    )


class QueryValidateResponse(BaseModel):
    valid: bool
    results: list[ValidationResult] = []


class DocumentValidateRequest(BaseModel):
    """Request body for POST /validate/document."""

    uri: str = Field(description="Document URI or file name, matched against file_pattern")
    text: str = Field(description="Full Baton SQL YAML content")
    force: bool = False


class DocumentValidateResponse(BaseModel):
    uri: str
    skipped: bool = False
    diagnostics: list[Diagnostic] = []
    errors: list[DocumentError] = []


class CodeActionRequest(BaseModel):
    """Request body for POST /code-actions."""

    uri: str
    diagnostics: list[Diagnostic]


class CodeActionResponse(BaseModel):
    actions: list[CodeAction] = []


class DefinitionRequest(BaseModel):
    """Request body for POST /definition."""

    uri: str
    text: str
    position: Position


class SymbolLocation(BaseModel):
    name: str
    kind: str
    uri: str
    range: Range


class DefinitionResponse(BaseModel):
    locations: list[SymbolLocation] = []


class CacheClearResponse(BaseModel):
    cleared: int
