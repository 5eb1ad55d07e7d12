"""
Will Engine - Family Context Classifier

Reduces the Name Bank plus the relationship status into the flat flag/count
record the suggestion table is keyed on.

Child classification:
- client children: every child that is not a Step-child
- prior children: client children whose non-client parent is set and is not
  the first spouse
- current-spouse children: client children whose non-client parent is the
  first spouse
"""

from __future__ import annotations
import logging
from typing import List, Optional

from ...models.entities import BaseRole, ChildRelationship, Person
from ...models.family import FamilyContext
from ..intake import IntakeSnapshot
from ..name_bank import parse_count

logger = logging.getLogger(__name__)


def first_spouse_id(snapshot: IntakeSnapshot) -> Optional[str]:
    spouses = snapshot.people_with_role(BaseRole.SPOUSE)
    return spouses[0].id if spouses else None


def client_children(snapshot: IntakeSnapshot) -> List[Person]:
    return [c for c in snapshot.children() if not c.is_step_child]


def children_of_type(snapshot: IntakeSnapshot, relationship: ChildRelationship) -> List[Person]:
    return [c for c in snapshot.children() if c.child_relationship == relationship]


def prior_children(snapshot: IntakeSnapshot) -> List[Person]:
    spouse_id = first_spouse_id(snapshot)
    return [
        child for child in client_children(snapshot)
        if child.other_parent is not None and child.other_parent != spouse_id
    ]


def current_spouse_children(snapshot: IntakeSnapshot) -> List[Person]:
    spouse_id = first_spouse_id(snapshot)
    if spouse_id is None:
        return []
    return [child for child in client_children(snapshot) if child.other_parent == spouse_id]


def build_family_context(snapshot: IntakeSnapshot) -> FamilyContext:
    """
    Classify the testator's family situation.

    `has_client_children` is also set by the top-level HasChildren flag so a
    declaration made before any Child entity exists still counts. The
    client-children count prefers real entities, then the declared hint
    (minimum 1).
    """
    relationship = snapshot.relationship
    own_children = client_children(snapshot)
    art_children = children_of_type(snapshot, ChildRelationship.ART)
    current_children = current_spouse_children(snapshot)

    has_children_flag = snapshot.text("HasChildren").lower() == "yes"
    if own_children:
        children_count = len(own_children)
    elif has_children_flag:
        children_count = max(parse_count(snapshot.get("ChildrenCount")) or 0, 1)
    else:
        children_count = 0

    context = FamilyContext(
        relationship=relationship,
        has_spouse=bool(snapshot.people_with_role(BaseRole.SPOUSE)) or relationship == "married",
        has_partner=bool(snapshot.people_with_role(BaseRole.PARTNER)),
        has_former_spouse=bool(snapshot.people_with_role(BaseRole.FORMER_SPOUSE)),
        has_guardian=bool(snapshot.people_with_role(BaseRole.GUARDIAN)),
        has_client_children=bool(own_children) or has_children_flag,
        has_step_children=bool(children_of_type(snapshot, ChildRelationship.STEP_CHILD)),
        has_adopted_children=bool(children_of_type(snapshot, ChildRelationship.ADOPTED)),
        has_art_children=bool(art_children),
        has_prior_children=bool(prior_children(snapshot)),
        has_current_spouse_children=bool(current_children),
        client_children_count=children_count,
        current_spouse_children_count=len(current_children),
        art_children_count=len(art_children),
    )
    logger.debug(f"Family context for '{relationship}': {context}")
    return context
