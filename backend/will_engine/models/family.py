"""
Will Engine - Family Models

Output records of the Family Context Classifier and the Family Graph
Builder. Both are projections recomputed from the intake snapshot on every
read; nothing here is persisted.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Tuple

from .entities import ParentRef


@dataclass(frozen=True)
class FamilyContext:
    """Flat flag/count summary of the testator's relationship and children."""
    relationship: str = ""
    has_spouse: bool = False
    has_partner: bool = False
    has_former_spouse: bool = False
    has_guardian: bool = False
    has_client_children: bool = False
    has_step_children: bool = False
    has_adopted_children: bool = False
    has_art_children: bool = False
    has_prior_children: bool = False
    has_current_spouse_children: bool = False
    client_children_count: int = 0
    current_spouse_children_count: int = 0
    art_children_count: int = 0

    @property
    def is_married(self) -> bool:
        return self.relationship == "married"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PartnerDescriptor:
    """Display record for a partner (or the client) in the family graph."""
    id: ParentRef
    name: str
    caption: str
    modifier: str  # client, spouse, partner, placeholder


@dataclass(frozen=True)
class ChildDescriptor:
    id: str
    name: str
    meta: str


@dataclass(frozen=True)
class PartnerStack:
    partner: PartnerDescriptor
    children: Tuple[ChildDescriptor, ...] = ()
    is_current: bool = False


@dataclass(frozen=True)
class FamilyGraph:
    """
    Partitioned family view.

    Former-partner stacks come first, the primary partner's stack last.
    Every child (step-children included) appears in exactly one stack or in `unpaired`.
    """
    client: PartnerDescriptor
    stacks: Tuple[PartnerStack, ...] = ()
    unpaired: Tuple[ChildDescriptor, ...] = ()
    primary_partner_id: ParentRef = None

    @property
    def has_partners(self) -> bool:
        return bool(self.stacks)

    def child_ids(self) -> Tuple[str, ...]:
        ids = [child.id for stack in self.stacks for child in stack.children]
        ids.extend(child.id for child in self.unpaired)
        return tuple(ids)


@dataclass(frozen=True)
class FamilySelectionUpdate:
    """Proposed next family selection produced by the auto-managed rule."""
    selection: Tuple[str, ...] = field(default_factory=tuple)
    applied: bool = False
