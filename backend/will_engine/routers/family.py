"""
Will Engine - Family API Router

Family context, clause suggestions, the family graph and Name Bank
upkeep. Every endpoint is a pure projection of the posted intake; the
caller owns persistence and applies the proposed values itself.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..services.family import (
    build_family_context,
    build_family_graph,
    get_engine,
)
from ..services.intake import IntakeSnapshot
from ..services.name_bank import (
    entity_to_dict,
    ensure_required_entities,
    link_co_parent,
    sync_children_count,
)
from .common import IntakeRequest, graph_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/family", tags=["family"])


# =============================================================================
# PYDANTIC MODELS FOR API
# =============================================================================

class SuggestionRequest(IntakeRequest):
    # Intake before the edit; when set, the auto-managed rule is evaluated
    prior_intake: Optional[Dict[str, Any]] = None
    selection: Optional[List[str]] = None


class SuggestionResponse(BaseModel):
    suggestions: List[str]
    selection: List[str]
    applied: bool = False


class NameBankResponse(BaseModel):
    entities: List[Dict[str, Any]]
    changed: bool
    field_updates: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/context")
async def family_context(request: IntakeRequest):
    """Family Context flags and counts for the posted intake."""
    return build_family_context(request.snapshot()).to_dict()


@router.post("/suggestions", response_model=SuggestionResponse)
async def family_suggestions(request: SuggestionRequest):
    """
    Suggested family clauses, plus the proposed stored selection.

    Without `prior_intake` the selection is the stored one (or the
    suggestion when nothing is stored).
    """
    engine = get_engine()
    snapshot = request.snapshot()
    suggestions = engine.suggest(build_family_context(snapshot))

    if request.prior_intake is None:
        stored = list(request.selection if request.selection is not None else snapshot.selection("family"))
        return SuggestionResponse(
            suggestions=list(suggestions),
            selection=stored or list(suggestions),
            applied=not stored,
        )

    prior = IntakeSnapshot.from_dict(request.prior_intake, request.selections)
    update = engine.next_family_selection(prior, snapshot, request.selection)
    if update.applied:
        logger.info(f"Family selection auto-updated: {list(update.selection)}")
    return SuggestionResponse(
        suggestions=list(suggestions),
        selection=list(update.selection),
        applied=update.applied,
    )


@router.post("/graph")
async def family_graph(request: IntakeRequest):
    """Partner stacks (former partners first) and unpaired children."""
    return graph_to_dict(build_family_graph(request.snapshot()))


@router.post("/name-bank", response_model=NameBankResponse)
async def reconcile_name_bank(request: IntakeRequest):
    """Proposed Name Bank with required Spouse/Child entries and matching counts."""
    snapshot = request.snapshot()
    entities, changed = ensure_required_entities(snapshot.fields, snapshot.entities)
    return NameBankResponse(
        entities=[entity_to_dict(entity) for entity in entities],
        changed=changed,
        field_updates=sync_children_count(snapshot.fields, entities),
    )


@router.post("/children/{child_id}/co-parent", response_model=NameBankResponse)
async def add_co_parent(child_id: str, request: IntakeRequest):
    """Proposed Name Bank with a new co-parent linked to the child."""
    snapshot = request.snapshot()
    if snapshot.entity(child_id) is None:
        raise HTTPException(status_code=404, detail="Child not found")
    entities = link_co_parent(snapshot.entities, child_id)
    return NameBankResponse(
        entities=[entity_to_dict(entity) for entity in entities],
        changed=len(entities) != len(snapshot.entities),
    )
