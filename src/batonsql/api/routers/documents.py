"""Document state endpoints: close, code actions, definitions and cache reset."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from batonsql.api.deps import get_engine
from batonsql.api.schemas import (
    CacheClearResponse,
    CodeActionRequest,
    CodeActionResponse,
    DefinitionRequest,
    DefinitionResponse,
    SymbolLocation,
)
from batonsql.service.engine import ValidationEngine

router = APIRouter()


@router.delete("/documents/{uri:path}", status_code=204)
async def close_document(
    uri: str,
    engine: ValidationEngine = Depends(get_engine),  # noqa: B008
) -> None:
    """Forget the digest, symbols and fixes recorded for a document."""
    engine.close_document(uri)


@router.post("/code-actions", response_model=CodeActionResponse)
async def code_actions(
    body: CodeActionRequest,
    engine: ValidationEngine = Depends(get_engine),  # noqa: B008
) -> CodeActionResponse:
    """Quick fixes for diagnostics reported by a previous document pass."""
    return CodeActionResponse(actions=engine.code_actions(body.uri, body.diagnostics))


@router.post("/definition", response_model=DefinitionResponse)
async def definition(
    body: DefinitionRequest,
    engine: ValidationEngine = Depends(get_engine),  # noqa: B008
) -> DefinitionResponse:
    """Where the table or resource type under the cursor is defined."""
    symbols = engine.definition(
        body.uri, body.text, body.position.line, body.position.character
    )
    return DefinitionResponse(
        locations=[
            SymbolLocation(name=s.name, kind=s.kind, uri=s.uri, range=s.range) for s in symbols
        ]
    )


@router.post("/cache/clear", response_model=CacheClearResponse)
async def clear_cache(
    engine: ValidationEngine = Depends(get_engine),  # noqa: B008
) -> CacheClearResponse:
    """Drop cached results and document digests."""
    cleared = engine.cache_size
    engine.on_configuration_change()
    return CacheClearResponse(cleared=cleared)
