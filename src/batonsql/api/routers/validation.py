"""Validation endpoints: POST /validate/query and POST /validate/document."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from batonsql.api.deps import get_engine
from batonsql.api.schemas import (
    DocumentValidateRequest,
    DocumentValidateResponse,
    QueryValidateRequest,
    QueryValidateResponse,
)
from batonsql.service.engine import ValidationEngine

router = APIRouter()


@router.post("/query", response_model=QueryValidateResponse)
async def validate_query(
    body: QueryValidateRequest,
    engine: ValidationEngine = Depends(get_engine),  # noqa: B008
) -> QueryValidateResponse:
    """Run every active rule over one SQL string."""
    results = engine.validate(body.query, body.original_query)
    return QueryValidateResponse(valid=not results, results=results)


@router.post("/document", response_model=DocumentValidateResponse)
async def validate_document(
    body: DocumentValidateRequest,
    engine: ValidationEngine = Depends(get_engine),  # noqa: B008
) -> DocumentValidateResponse:
    """Lint every SQL string in a Baton SQL YAML document."""
    report = engine.validate_document(body.uri, body.text, force=body.force)
    return DocumentValidateResponse(
        uri=report.uri,
        skipped=report.skipped,
        diagnostics=report.diagnostics,
        errors=report.errors,
    )
