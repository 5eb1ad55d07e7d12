"""
Family Graph Builder

Partitions children into partner-keyed stacks for display and narrative.

Bucketing:
- key = the first of parent_a / parent_b that is set and is not the client
- no such parent → NO_PARTNER (unpaired)

Primary partner: the first Spouse; without one, the bucket holding the most
children (earliest bucket wins ties). Every other bucket, plus any adult
flagged "Former Spouse", is a former partner. Former stacks are ordered
before the primary stack.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Mapping, Optional

from ...models.entities import (
    BaseRole,
    ChildRelationship,
    ClientNode,
    CLIENT,
    NO_PARTNER,
    ParentRef,
    Person,
)
from ...models.family import (
    ChildDescriptor,
    FamilyGraph,
    PartnerDescriptor,
    PartnerStack,
)
from ..intake import IntakeSnapshot
from ..name_bank import CLIENT_FALLBACK_NAME, resolve_name

logger = logging.getLogger(__name__)


def bucket_key(child: Person) -> ParentRef:
    """Partner bucket for a child: its non-client parent, else NO_PARTNER."""
    for parent in (child.parent_a, child.parent_b):
        if parent and parent != CLIENT:
            return parent
    return NO_PARTNER


def describe_child(child: Person) -> ChildDescriptor:
    relationship = child.child_relationship or ChildRelationship.BIOLOGICAL
    meta = relationship.value
    if relationship != ChildRelationship.BIOLOGICAL:
        if child.treat_as_biological:
            meta = f"{meta} • treated as biological"
        else:
            meta = f"{meta} • not treated as biological"
    return ChildDescriptor(
        id=child.id,
        name=resolve_name(child) or "Unnamed Child",
        meta=meta,
    )


class FamilyGraphBuilder:
    """Builds the partner-stack view of a snapshot's Name Bank."""

    def build(self, snapshot: IntakeSnapshot) -> FamilyGraph:
        """
        Build the family graph.

        Args:
            snapshot: Intake snapshot (entities are already normalized)

        Returns:
            FamilyGraph with former stacks first and the primary stack last
        """
        client = snapshot.client
        people = snapshot.people()
        # Every child is bucketed here, step-children included
        children = [p for p in people if p.is_child]
        adults = {p.id: p for p in people if not p.is_child}

        buckets: Dict[ParentRef, List[Person]] = {}
        for child in children:
            buckets.setdefault(bucket_key(child), []).append(child)

        primary_id = self._primary_partner_id(list(adults.values()), buckets)

        former: List[ParentRef] = [
            key for key in buckets if key != NO_PARTNER and key != primary_id
        ]
        for adult in adults.values():
            if adult.has_role(BaseRole.FORMER_SPOUSE) and adult.id != primary_id:
                former.append(adult.id)

        order: List[ParentRef] = list(dict.fromkeys(former))
        if primary_id and primary_id not in order:
            order.append(primary_id)

        stacks = []
        for partner_id in order:
            partner = self.describe_partner(partner_id, client, adults)
            stacks.append(PartnerStack(
                partner=partner,
                children=tuple(describe_child(c) for c in buckets.get(partner_id, [])),
                is_current=partner.modifier == "spouse" or partner_id == primary_id,
            ))

        unpaired = tuple(describe_child(c) for c in buckets.get(NO_PARTNER, []))
        logger.debug(
            f"Family graph: {len(stacks)} partner stacks, {len(unpaired)} unpaired children"
        )
        return FamilyGraph(
            client=self.describe_partner(CLIENT, client, adults),
            stacks=tuple(stacks),
            unpaired=unpaired,
            primary_partner_id=primary_id,
        )

    def _primary_partner_id(
        self,
        adults: List[Person],
        buckets: Mapping[ParentRef, List[Person]],
    ) -> Optional[str]:
        for adult in adults:
            if adult.primary_role == BaseRole.SPOUSE:
                return adult.id

        primary_id = None
        most = 0
        for key, members in buckets.items():
            if key == NO_PARTNER:
                continue
            if len(members) > most:
                most = len(members)
                primary_id = key
        return primary_id

    def describe_partner(
        self,
        partner_id: ParentRef,
        client: Optional[ClientNode],
        adults: Mapping[str, Person],
    ) -> PartnerDescriptor:
        if not partner_id:
            return PartnerDescriptor(id="", name="Unassigned", caption="Partner", modifier="placeholder")
        if partner_id == CLIENT:
            return PartnerDescriptor(
                id=CLIENT,
                name=resolve_name(client) or CLIENT_FALLBACK_NAME,
                caption="Client",
                modifier="client",
            )
        person = adults.get(partner_id)
        if person is None:
            return PartnerDescriptor(
                id=partner_id, name="Not in Name Bank", caption="Unknown", modifier="placeholder",
            )
        caption = person.badges[0] if person.badges else person.primary_role.value
        return PartnerDescriptor(
            id=partner_id,
            name=resolve_name(person) or "Unnamed Person",
            caption=caption or "Partner",
            modifier="spouse" if person.primary_role == BaseRole.SPOUSE else "partner",
        )


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

_builder: Optional[FamilyGraphBuilder] = None


def get_builder() -> FamilyGraphBuilder:
    """Get or create the default graph builder singleton."""
    global _builder
    if _builder is None:
        _builder = FamilyGraphBuilder()
    return _builder


def build_family_graph(snapshot: IntakeSnapshot) -> FamilyGraph:
    return get_builder().build(snapshot)
