"""
Will Engine - Documents API Router

Token derivation and will previews. Previews are computed in memory for
each request and never stored.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..catalogs import get_library
from ..models import ClauseLibrary
from ..services.document import WillAssembler
from ..services.tokens import (
    derive_tokens,
    redistribute_evenly,
    redistribute_proportionally,
    summarize_backup_charities,
)
from .common import IntakeRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


class RedistributeRequest(BaseModel):
    entries: List[Dict[str, Any]] = Field(default_factory=list)
    mode: str = "even"  # even | proportional
    index: Optional[int] = None
    value: Optional[str] = None


@router.post("/tokens")
async def document_tokens(request: IntakeRequest):
    """Derived token map; unresolved tokens are null."""
    return {"tokens": derive_tokens(request.snapshot())}


@router.post("/preview")
async def document_preview(
    request: IntakeRequest,
    library: ClauseLibrary = Depends(get_library),
):
    """Resolved clause ids, the hydrated will and the clauses-only will."""
    snapshot = request.snapshot()
    assembler = WillAssembler(library)
    tokens = derive_tokens(snapshot)
    document = assembler.assemble(snapshot, hydrate=True, tokens=tokens)
    clauses_only = assembler.assemble(snapshot, hydrate=False)
    return {
        "resolved_clauses": assembler.resolved_clauses(snapshot),
        "document": document.to_dict(),
        "clauses_only": clauses_only.to_dict(),
    }


@router.post("/backup-charities/redistribute")
async def redistribute_backup_charities(request: RedistributeRequest):
    """Rebalanced backup charity shares and the resulting status."""
    if request.mode == "even":
        entries = redistribute_evenly(request.entries)
    elif request.mode == "proportional":
        if request.index is None:
            raise HTTPException(status_code=400, detail="index is required for proportional mode")
        entries = redistribute_proportionally(request.entries, request.index, request.value)
    else:
        raise HTTPException(status_code=400, detail=f"Unknown mode: {request.mode}")
    return {
        "entries": entries,
        "summary": summarize_backup_charities(entries).to_dict(),
    }
