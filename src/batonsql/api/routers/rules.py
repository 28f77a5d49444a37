"""Rule listing endpoint: GET /rules."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from batonsql.api.deps import get_engine
from batonsql.api.schemas import RuleInfo, RuleListResponse
from batonsql.service.engine import ValidationEngine

router = APIRouter()


@router.get("", response_model=RuleListResponse)
async def list_rules(
    engine: ValidationEngine = Depends(get_engine),  # noqa: B008
) -> RuleListResponse:
    """List the active validation rules in evaluation order."""
    return RuleListResponse(
        dialect=engine.settings.sql_dialect,
        rules=[
            RuleInfo(name=rule.name, description=rule.description, scope=rule.scope)
            for rule in engine.rules
        ],
    )
