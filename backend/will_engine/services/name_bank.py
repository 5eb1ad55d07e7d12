"""
Will Engine - Name Bank

Normalization, naming and construction helpers for Name Bank entities.

Every function here is pure: it takes records and returns new records or
proposed updates. Writing the result back to the intake store is the
caller's job.

Wire format: entities arrive from the intake store as camelCase dicts
(`primaryRole`, `childParentAId`, ...). `entity_from_dict` / `entity_to_dict`
translate between that shape and the frozen dataclasses.
"""

from __future__ import annotations
from dataclasses import replace
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..models.entities import (
    Address,
    BaseRole,
    ChildRelationship,
    ClientNode,
    CLIENT,
    Entity,
    EntityKind,
    Organization,
    ParentRef,
    Person,
    Sentinel,
    new_entity_id,
)

logger = logging.getLogger(__name__)


MONTHS = [
    "", "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

BASE_ROLE_VALUES = tuple(role.value for role in BaseRole)

# Role labels that create organizations instead of people
ORGANIZATION_ROLES = {
    "Charity": EntityKind.CHARITY,
    "Corporate Fiduciary": EntityKind.CORPORATE,
}

PARENT_NOT_FOUND_LABEL = "(Parent not in Name Bank)"
UNASSIGNED_LABEL = "Unassigned"
CLIENT_FALLBACK_NAME = "Client / Testator"


# =============================================================================
# COERCION HELPERS
# =============================================================================

def is_truthy_flag(value: Any) -> bool:
    """Intake toggles arrive as bools or as "true"/"yes" strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return False


def coerce_role(value: Any) -> Optional[BaseRole]:
    if isinstance(value, BaseRole):
        return value
    if isinstance(value, str) and value in BASE_ROLE_VALUES:
        return BaseRole(value)
    return None


def resolve_primary_role(primary: Any, badges: Iterable[str] = ()) -> BaseRole:
    """
    Clamp a primary role into the closed set.

    A valid stated primary wins; otherwise the first badge that is a base
    role; otherwise OTHER.
    """
    role = coerce_role(primary)
    if role is not None:
        return role
    for badge in badges:
        role = coerce_role(badge)
        if role is not None:
            return role
    return BaseRole.OTHER


def coerce_relationship(value: Any) -> ChildRelationship:
    if isinstance(value, ChildRelationship):
        return value
    if isinstance(value, str):
        for relationship in ChildRelationship:
            if relationship.value.lower() == value.strip().lower():
                return relationship
    return ChildRelationship.BIOLOGICAL


def parse_parent_ref(value: Any) -> ParentRef:
    """Wire value -> parent slot. The client's wire id becomes the sentinel."""
    if isinstance(value, Sentinel):
        return value
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if text == Sentinel.CLIENT.value:
        return CLIENT
    return text


def dump_parent_ref(ref: ParentRef) -> str:
    if isinstance(ref, Sentinel):
        return ref.value
    return ref or ""


def _dedupe(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize_person(person: Person) -> Person:
    """
    Settle defaults and migrate legacy fields. Idempotent.

    - primary role clamped to the closed set
    - badges: blanks, duplicates and the primary role itself removed
    - include toggles for middle/suffix settled from text presence
    - children: relationship type defaulted, legacy single parent moved to
      parent_b, parent_a linked to the client unless a step-child
    - non-children: all child fields cleared
    """
    raw_badges = [str(b).strip() for b in person.badges if b is not None]
    primary = resolve_primary_role(person.primary_role, raw_badges)
    badges = _dedupe(b for b in raw_badges if b and b != primary.value)

    middle_enabled = person.middle_enabled
    if middle_enabled is None:
        middle_enabled = bool(person.middle.strip())
    suffix_enabled = person.suffix_enabled
    if suffix_enabled is None:
        suffix_enabled = bool(person.suffix.strip())

    if primary != BaseRole.CHILD:
        return replace(
            person,
            primary_role=primary,
            badges=badges,
            middle_enabled=middle_enabled,
            suffix_enabled=suffix_enabled,
            child_relationship=None,
            treat_as_biological=None,
            parent_a=None,
            parent_b=None,
            legacy_other_parent=None,
        )

    relationship = coerce_relationship(person.child_relationship)
    is_step = relationship == ChildRelationship.STEP_CHILD

    treat_as_biological = person.treat_as_biological
    if relationship == ChildRelationship.BIOLOGICAL or treat_as_biological is None:
        treat_as_biological = True

    parent_a = parse_parent_ref(person.parent_a)
    parent_b = parse_parent_ref(person.parent_b)
    legacy = parse_parent_ref(person.legacy_other_parent)
    if legacy is not None and parent_b is None:
        parent_b = legacy

    if is_step and parent_a == CLIENT:
        parent_a = None
    if not is_step and parent_a is None:
        parent_a = CLIENT

    return replace(
        person,
        primary_role=primary,
        badges=badges,
        middle_enabled=middle_enabled,
        suffix_enabled=suffix_enabled,
        child_relationship=relationship,
        treat_as_biological=treat_as_biological,
        parent_a=parent_a,
        parent_b=parent_b,
        legacy_other_parent=None,
    )


def normalize_organization(org: Organization) -> Organization:
    kind = org.kind if org.kind in (EntityKind.CHARITY, EntityKind.CORPORATE) else EntityKind.CHARITY
    if kind == org.kind:
        return org
    return replace(org, kind=kind)


def normalize_entity(entity: Entity) -> Entity:
    if isinstance(entity, Organization):
        return normalize_organization(entity)
    return normalize_person(entity)


def normalize_entities(entities: Iterable[Entity]) -> List[Entity]:
    return [normalize_entity(entity) for entity in entities]


# =============================================================================
# NAMING
# =============================================================================

def format_middle_initial(value: str) -> str:
    text = (value or "").strip()
    if not text:
        return ""
    return f"{text[0].upper()}."


def resolve_name(entity: Union[Entity, ClientNode, None]) -> str:
    """
    Display name for a person, organization or the client node.

    Included parts are joined with single spaces; empty parts are skipped.
    The middle name collapses to an initial only when both the middle
    toggle and the initial-only flag are set.
    """
    if entity is None:
        return ""
    if isinstance(entity, Organization):
        return entity.name.strip()

    middle_enabled = entity.middle_enabled
    if middle_enabled is None:
        middle_enabled = bool(entity.middle.strip())
    suffix_enabled = entity.suffix_enabled
    if suffix_enabled is None:
        suffix_enabled = bool(entity.suffix.strip())

    middle = ""
    if middle_enabled:
        middle = entity.middle.strip()
        if middle and entity.middle_initial_only:
            middle = format_middle_initial(middle)

    parts = [
        entity.first.strip() if entity.first_enabled else "",
        middle,
        entity.last.strip() if entity.last_enabled else "",
        entity.suffix.strip() if suffix_enabled else "",
    ]
    return " ".join(part for part in parts if part)


def organization_display_name(org: Organization) -> str:
    if org.name.strip():
        return org.name.strip()
    if org.kind == EntityKind.CORPORATE:
        return "Unnamed Corporate Fiduciary"
    return "Unnamed Charity"


# =============================================================================
# WIRE FORMAT
# =============================================================================

def _text(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    return str(value)


def _optional_flag(raw: Mapping[str, Any], key: str) -> Optional[bool]:
    if key not in raw or raw.get(key) is None:
        return None
    return is_truthy_flag(raw.get(key))


def _entity_kind(raw: Mapping[str, Any]) -> EntityKind:
    entity_type = str(raw.get("entityType") or "").strip().lower()
    if entity_type == EntityKind.CHARITY.value:
        return EntityKind.CHARITY
    if entity_type == EntityKind.CORPORATE.value:
        return EntityKind.CORPORATE
    primary = raw.get("primaryRole")
    if primary in ORGANIZATION_ROLES:
        return ORGANIZATION_ROLES[primary]
    return EntityKind.PERSON


def entity_from_dict(raw: Mapping[str, Any]) -> Entity:
    """
    Build a normalized entity from its stored dict.

    Records without an id get a fresh one so every entity in the arena is
    addressable.
    """
    entity_id = str(raw.get("id") or "").strip() or new_entity_id()
    kind = _entity_kind(raw)

    if kind != EntityKind.PERSON:
        return normalize_organization(Organization(
            id=entity_id,
            kind=kind,
            name=_text(raw, "charityName"),
            purpose=_text(raw, "charityPurpose"),
            tax_id=_text(raw, "charityEIN"),
            address=Address(
                street1=_text(raw, "charityStreet1"),
                street2=_text(raw, "charityStreet2"),
                city=_text(raw, "charityCity"),
                state=_text(raw, "charityState"),
                zip_code=_text(raw, "charityZip"),
            ),
            email=_text(raw, "charityEmail"),
            phone=_text(raw, "charityPhone"),
        ))

    roles = raw.get("roles")
    badges = tuple(str(r) for r in roles if r) if isinstance(roles, (list, tuple)) else ()

    treat = raw.get("childTreatAsBio")
    treat_as_biological = None if treat in (None, "") else is_truthy_flag(treat)

    relationship = raw.get("childRelationship")

    return normalize_person(Person(
        id=entity_id,
        first=_text(raw, "first"),
        middle=_text(raw, "middle"),
        last=_text(raw, "last"),
        suffix=_text(raw, "suffix"),
        first_enabled=_optional_flag(raw, "firstEnabled") is not False,
        middle_enabled=_optional_flag(raw, "middleEnabled"),
        middle_initial_only=is_truthy_flag(raw.get("middleInitialOnly")),
        last_enabled=_optional_flag(raw, "lastEnabled") is not False,
        suffix_enabled=_optional_flag(raw, "suffixEnabled"),
        primary_role=raw.get("primaryRole"),
        badges=badges,
        address=Address(
            street1=_text(raw, "addressStreet1"),
            street2=_text(raw, "addressStreet2"),
            city=_text(raw, "addressCity"),
            county=_text(raw, "addressCounty"),
            state=_text(raw, "addressState"),
            zip_code=_text(raw, "addressZip"),
        ),
        dob_month=_text(raw, "dobMonth"),
        dob_day=_text(raw, "dobDay"),
        dob_year=_text(raw, "dobYear"),
        child_relationship=relationship if relationship else None,
        treat_as_biological=treat_as_biological,
        parent_a=parse_parent_ref(raw.get("childParentAId")),
        parent_b=parse_parent_ref(raw.get("childParentBId")),
        legacy_other_parent=parse_parent_ref(raw.get("childOtherParentId")),
    ))


def entity_to_dict(entity: Entity) -> Dict[str, Any]:
    """Stored dict for an entity (inverse of entity_from_dict)."""
    if isinstance(entity, Organization):
        return {
            "id": entity.id,
            "entityType": entity.kind.value,
            "primaryRole": "Charity" if entity.kind == EntityKind.CHARITY else "Corporate Fiduciary",
            "charityName": entity.name,
            "charityPurpose": entity.purpose,
            "charityEIN": entity.tax_id,
            "charityStreet1": entity.address.street1,
            "charityStreet2": entity.address.street2,
            "charityCity": entity.address.city,
            "charityState": entity.address.state,
            "charityZip": entity.address.zip_code,
            "charityEmail": entity.email,
            "charityPhone": entity.phone,
        }

    data: Dict[str, Any] = {
        "id": entity.id,
        "first": entity.first,
        "middle": entity.middle,
        "last": entity.last,
        "suffix": entity.suffix,
        "firstEnabled": entity.first_enabled,
        "middleEnabled": entity.middle_enabled,
        "middleInitialOnly": entity.middle_initial_only,
        "lastEnabled": entity.last_enabled,
        "suffixEnabled": entity.suffix_enabled,
        "primaryRole": entity.primary_role.value,
        "roles": [entity.primary_role.value, *entity.badges],
        "addressStreet1": entity.address.street1,
        "addressStreet2": entity.address.street2,
        "addressCity": entity.address.city,
        "addressCounty": entity.address.county,
        "addressState": entity.address.state,
        "addressZip": entity.address.zip_code,
        "dobMonth": entity.dob_month,
        "dobDay": entity.dob_day,
        "dobYear": entity.dob_year,
    }
    if entity.is_child:
        data.update({
            "childRelationship": entity.child_relationship.value,
            "childTreatAsBio": "Yes" if entity.treat_as_biological else "No",
            "childParentAId": dump_parent_ref(entity.parent_a),
            "childParentBId": dump_parent_ref(entity.parent_b),
        })
    return data


# =============================================================================
# CLIENT NODE
# =============================================================================

def split_client_dob(raw_dob: Any) -> Tuple[str, str, str]:
    """"YYYY-MM-DD" -> (month name, day, year); anything else -> blanks."""
    if not raw_dob:
        return ("", "", "")
    parts = str(raw_dob).split("-")
    if len(parts) != 3:
        return ("", "", "")
    year, month, day = parts
    try:
        month_number = int(month)
        month_name = MONTHS[month_number] if 1 <= month_number < len(MONTHS) else ""
    except ValueError:
        month_name = ""
    try:
        day_text = str(int(day))
    except ValueError:
        day_text = ""
    return (month_name, day_text, year or "")


def parse_count(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def build_client_node(fields: Mapping[str, Any]) -> ClientNode:
    """Synthesize the client/testator node from top-level intake fields."""
    middle_enabled = is_truthy_flag(fields.get("ClientMiddleToggle"))
    suffix_enabled = is_truthy_flag(fields.get("ClientSuffixToggle"))
    month, day, year = split_client_dob(fields.get("ClientDOB"))
    return ClientNode(
        first=_text(fields, "ClientFirstName"),
        middle=_text(fields, "ClientMiddleName") if middle_enabled else "",
        last=_text(fields, "ClientLastName"),
        suffix=_text(fields, "ClientSuffix") if suffix_enabled else "",
        middle_enabled=middle_enabled,
        middle_initial_only=is_truthy_flag(fields.get("ClientMiddleInitialOnly")),
        suffix_enabled=suffix_enabled,
        address=Address(
            street1=_text(fields, "ClientStreet1"),
            street2=_text(fields, "ClientStreet2"),
            city=_text(fields, "ClientCity"),
            county=_text(fields, "DomicileCounty"),
            state=_text(fields, "DomicileState"),
            zip_code=_text(fields, "ClientZip"),
        ),
        dob_month=month,
        dob_day=day,
        dob_year=year,
        relationship_status=_text(fields, "RelationshipStatus"),
        children_count_hint=parse_count(fields.get("ChildrenCount")) or 0,
    )


def describe_parent(
    ref: ParentRef,
    client: Optional[ClientNode],
    by_id: Mapping[str, Entity],
) -> str:
    """Display label for a child's parent slot."""
    if ref is None or ref == "":
        return UNASSIGNED_LABEL
    if ref == CLIENT:
        return resolve_name(client) or CLIENT_FALLBACK_NAME
    match = by_id.get(ref) if isinstance(ref, str) else None
    if match is None:
        return PARENT_NOT_FOUND_LABEL
    return resolve_name(match) or "Unnamed"


# =============================================================================
# CONSTRUCTION
# =============================================================================

def create_person(role: Union[BaseRole, str] = BaseRole.OTHER, **overrides: Any) -> Person:
    """New normalized person. Children default to Biological, linked to the client."""
    primary = resolve_primary_role(role)
    base = Person(primary_role=primary, badges=(primary.value,))
    if primary == BaseRole.CHILD:
        base = replace(
            base,
            child_relationship=ChildRelationship.BIOLOGICAL,
            treat_as_biological=True,
            parent_a=CLIENT,
        )
    return normalize_person(replace(base, **overrides))


def create_organization(kind: EntityKind = EntityKind.CHARITY, **overrides: Any) -> Organization:
    return normalize_organization(replace(Organization(kind=kind), **overrides))


def count_primary_role(entities: Sequence[Entity], role: BaseRole) -> int:
    return sum(
        1 for entity in entities
        if isinstance(entity, Person) and entity.primary_role == role
    )


def _entity_priority(entity: Entity) -> int:
    if isinstance(entity, Person):
        if entity.primary_role == BaseRole.SPOUSE:
            return 0
        if entity.primary_role == BaseRole.CHILD:
            return 1
    return 2


def ensure_required_entities(
    fields: Mapping[str, Any],
    entities: Sequence[Entity],
) -> Tuple[List[Entity], bool]:
    """
    Guarantee the entities the intake declares.

    Married -> at least one Spouse; HasChildren "Yes" -> at least
    max(ChildrenCount, 1) children. Result is sorted Spouse, Child, others
    (stable within each group).

    Returns:
        (proposed entity list, whether anything was added or changed)
    """
    normalized = normalize_entities(entities)
    mutated = any(a != b for a, b in zip(normalized, entities))

    def guarantee(role: BaseRole, count: int) -> None:
        nonlocal mutated
        existing = count_primary_role(normalized, role)
        for _ in range(existing, count):
            normalized.append(create_person(role))
            mutated = True

    relationship = _text(fields, "RelationshipStatus").strip().lower()
    if relationship == "married":
        guarantee(BaseRole.SPOUSE, 1)

    if _text(fields, "HasChildren").strip().lower() == "yes":
        declared = parse_count(fields.get("ChildrenCount"))
        guarantee(BaseRole.CHILD, max(declared, 1) if declared is not None else 1)

    ordered = sorted(normalized, key=_entity_priority)
    if [e.id for e in ordered] != [e.id for e in normalized]:
        mutated = True
    if mutated:
        logger.debug(f"Required Name Bank entries adjusted: {len(ordered)} entities")
    return ordered, mutated


def sync_children_count(fields: Mapping[str, Any], entities: Sequence[Entity]) -> Dict[str, Any]:
    """Proposed ChildrenCount / HasChildren updates matching the entity list."""
    child_count = count_primary_role(normalize_entities(entities), BaseRole.CHILD)
    current_count = parse_count(fields.get("ChildrenCount")) or 0
    desired_has_children = "Yes" if child_count > 0 else "No"
    current_has_children = _text(fields, "HasChildren") or ("Yes" if current_count > 0 else "No")

    updates: Dict[str, Any] = {}
    if child_count != current_count:
        updates["ChildrenCount"] = child_count
    if current_has_children != desired_has_children:
        updates["HasChildren"] = desired_has_children
    return updates


def link_co_parent(entities: Sequence[Entity], child_id: str) -> List[Entity]:
    """
    Add a new co-parent for a child and link it to the first empty slot.

    The co-parent is an "Other" person badged "Former Spouse". Unknown
    child ids leave the list unchanged.
    """
    result = list(entities)
    for index, entity in enumerate(result):
        if isinstance(entity, Person) and entity.id == child_id and entity.is_child:
            break
    else:
        return result

    co_parent = create_person(BaseRole.OTHER, badges=(BaseRole.FORMER_SPOUSE.value,))
    child = normalize_person(entity)
    parent_a, parent_b = child.parent_a, child.parent_b
    if not parent_a:
        parent_a = co_parent.id
    elif not parent_b:
        parent_b = co_parent.id

    result[index] = normalize_person(replace(child, parent_a=parent_a, parent_b=parent_b))
    result.append(co_parent)
    return result
