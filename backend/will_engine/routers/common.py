"""
Will Engine - Shared API models and serializers
"""
from __future__ import annotations
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from pydantic import BaseModel, Field

from ..models import ArticleKey, FamilyGraph, PartnerDescriptor, ParentRef, Sentinel
from ..services.intake import IntakeSnapshot


class IntakeRequest(BaseModel):
    """Raw intake store contents. Entities live under NameBank."""
    intake: Dict[str, Any] = Field(default_factory=dict)
    selections: Optional[Dict[str, Any]] = None  # defaults to intake["SelectedClauses"]

    def snapshot(self) -> IntakeSnapshot:
        return IntakeSnapshot.from_dict(self.intake, self.selections)


def parse_article(article: str) -> ArticleKey:
    try:
        return ArticleKey(article)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown article: {article}")


def ref_value(ref: ParentRef) -> str:
    if isinstance(ref, Sentinel):
        return ref.value
    return ref or ""


def partner_to_dict(partner: PartnerDescriptor) -> Dict[str, Any]:
    return {
        "id": ref_value(partner.id),
        "name": partner.name,
        "caption": partner.caption,
        "modifier": partner.modifier,
    }


def graph_to_dict(graph: FamilyGraph) -> Dict[str, Any]:
    stacks: List[Dict[str, Any]] = []
    for stack in graph.stacks:
        stacks.append({
            "partner": partner_to_dict(stack.partner),
            "children": [asdict(child) for child in stack.children],
            "is_current": stack.is_current,
        })
    return {
        "client": partner_to_dict(graph.client),
        "stacks": stacks,
        "unpaired": [asdict(child) for child in graph.unpaired],
        "primary_partner_id": ref_value(graph.primary_partner_id),
    }
