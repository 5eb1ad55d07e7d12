"""
Will Engine - Entity Models

Shared record shapes for the Name Bank (people, charities, corporate
fiduciaries) and the synthesized client/testator node.

Entities are immutable. Relationships between them are plain ids into a
flat collection (see services.intake.IntakeSnapshot for the id -> record
arena); no record holds a live reference to another.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union
from uuid import uuid4


# =============================================================================
# ENUMS
# =============================================================================

class BaseRole(str, Enum):
    """Closed set of primary roles a Name Bank person can hold."""
    SPOUSE = "Spouse"
    PARTNER = "Partner"
    FORMER_SPOUSE = "Former Spouse"
    CHILD = "Child"
    GUARDIAN = "Guardian"
    EXECUTOR = "Executor"
    TRUSTEE = "Trustee"
    BENEFICIARY = "Beneficiary"
    WITNESS = "Witness"
    DISINHERITED = "Disinherited"
    OTHER = "Other"


class EntityKind(str, Enum):
    PERSON = "person"
    CHARITY = "charity"
    CORPORATE = "corporate"


class ChildRelationship(str, Enum):
    BIOLOGICAL = "Biological"
    ADOPTED = "Adopted"
    STEP_CHILD = "Step-child"
    ART = "Conceived with ART"


class Sentinel(Enum):
    """
    Reserved ids that live outside the generated-id space.

    Not a str mixin: Sentinel.CLIENT never compares equal to any string id,
    including its own wire value.
    """
    CLIENT = "__CLIENT__"
    NO_PARTNER = "__no_partner__"

    def __repr__(self) -> str:
        return f"Sentinel.{self.name}"


CLIENT = Sentinel.CLIENT
NO_PARTNER = Sentinel.NO_PARTNER

# A parent slot holds nothing, the client sentinel, or another entity's id
ParentRef = Union[Sentinel, str, None]


def new_entity_id() -> str:
    return str(uuid4())


# =============================================================================
# RECORDS
# =============================================================================

@dataclass(frozen=True)
class Address:
    street1: str = ""
    street2: str = ""
    city: str = ""
    county: str = ""
    state: str = ""
    zip_code: str = ""


@dataclass(frozen=True)
class Person:
    """
    A natural person in the Name Bank.

    Name parts carry independent include toggles. `middle_enabled` and
    `suffix_enabled` start as None ("not decided") and are settled by
    normalization from whether the part has text.

    Child-only fields (`child_relationship`, `treat_as_biological`,
    `parent_a`, `parent_b`) are None for every other role.
    `legacy_other_parent` is the retired single-parent field; normalization
    moves it into `parent_b` and clears it.
    """
    id: str = field(default_factory=new_entity_id)
    first: str = ""
    middle: str = ""
    last: str = ""
    suffix: str = ""
    first_enabled: bool = True
    middle_enabled: Optional[bool] = None
    middle_initial_only: bool = False
    last_enabled: bool = True
    suffix_enabled: Optional[bool] = None

    primary_role: BaseRole = BaseRole.OTHER
    badges: Tuple[str, ...] = ()

    address: Address = field(default_factory=Address)
    dob_month: str = ""
    dob_day: str = ""
    dob_year: str = ""

    child_relationship: Optional[ChildRelationship] = None
    treat_as_biological: Optional[bool] = None
    parent_a: ParentRef = None
    parent_b: ParentRef = None
    legacy_other_parent: ParentRef = None

    @property
    def kind(self) -> EntityKind:
        return EntityKind.PERSON

    def has_role(self, role: Union[BaseRole, str]) -> bool:
        """True when the role is this person's primary role or one of its badges."""
        value = role.value if isinstance(role, BaseRole) else role
        return self.primary_role.value == value or value in self.badges

    @property
    def is_child(self) -> bool:
        return self.primary_role == BaseRole.CHILD

    @property
    def is_step_child(self) -> bool:
        return self.is_child and self.child_relationship == ChildRelationship.STEP_CHILD

    @property
    def other_parent(self) -> ParentRef:
        """
        The non-client parent of a child linked to the client.

        None when the client is not one of the parents, or when the remaining
        slot is empty.
        """
        if self.parent_a == CLIENT:
            other = self.parent_b
        elif self.parent_b == CLIENT:
            other = self.parent_a
        else:
            return None
        if not other or other == CLIENT:
            return None
        return other


@dataclass(frozen=True)
class Organization:
    """A charity or corporate fiduciary - same shape, distinguished by kind."""
    id: str = field(default_factory=new_entity_id)
    kind: EntityKind = EntityKind.CHARITY
    name: str = ""
    purpose: str = ""
    tax_id: str = ""
    address: Address = field(default_factory=Address)
    email: str = ""
    phone: str = ""

    def has_role(self, role: Union[BaseRole, str]) -> bool:
        return False


Entity = Union[Person, Organization]


@dataclass(frozen=True)
class ClientNode:
    """
    The testator, synthesized from top-level intake fields.

    Never stored in the entity collection; always referenced as CLIENT.
    """
    first: str = ""
    middle: str = ""
    last: str = ""
    suffix: str = ""
    middle_enabled: bool = False
    middle_initial_only: bool = False
    suffix_enabled: bool = False
    address: Address = field(default_factory=Address)
    dob_month: str = ""
    dob_day: str = ""
    dob_year: str = ""
    relationship_status: str = ""
    children_count_hint: int = 0

    id: Sentinel = field(default=CLIENT, init=False)
    first_enabled: bool = field(default=True, init=False)
    last_enabled: bool = field(default=True, init=False)
