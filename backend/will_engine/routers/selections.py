"""
Will Engine - Selections API Router

Normalizes persisted per-article clause selections.
"""
from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..catalogs import get_library
from ..models import ClauseLibrary
from ..services.clauses import SelectionResolver
from .common import parse_article

router = APIRouter(prefix="/selections", tags=["selections"])


class SelectionRequest(BaseModel):
    selection: List[str] = Field(default_factory=list)


class SelectionResponse(BaseModel):
    article: str
    selection: List[str]
    # Proposed stored list with the resolved primary made explicit
    persisted: List[str]


@router.post("/{article}/resolve", response_model=SelectionResponse)
async def resolve_selection(
    article: str,
    request: SelectionRequest,
    library: ClauseLibrary = Depends(get_library),
):
    """Normalize a stored selection against the article catalog."""
    key = parse_article(article)
    resolver = SelectionResolver(library)
    return SelectionResponse(
        article=key.value,
        selection=list(resolver.resolve(key, request.selection)),
        persisted=list(resolver.ensure_default_primary_selection(key, request.selection)),
    )
