"""
Token Derivation Engine

Computes every [[Token]] value from an intake snapshot.

Resolution precedence for person-valued tokens:
1. Manual value stored on the intake field
2. Entity lookup when that stored value is an entity id
3. Role-derived fallback (first Spouse, second Executor, ...)
4. Static default

Tokens left as None (or "") are not resolved; the hydrator keeps their
[[Token]] placeholder in the rendered text.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ...models.entities import BaseRole, ChildRelationship, Entity, Organization, Person
from ..clauses.hydrator import SUPPRESSED, placeholder
from ..family.context import (
    children_of_type,
    client_children,
    current_spouse_children,
    prior_children,
)
from ..intake import IntakeSnapshot
from ..name_bank import organization_display_name, resolve_name
from .formatting import (
    SELECT_CHARITY_MARKER,
    bullet,
    format_charity_percentage,
    inline,
    inline_with_and,
    with_dollar_sign,
)

logger = logging.getLogger(__name__)


DEFAULT_TOKENS: Dict[str, Optional[str]] = {
    "RelationshipStatusDescriptor": "single",
    "SpousePartnerTerm": "spouse",
    "SpousePartnerFullName": "my spouse",
    "MinorTrustAge": "25",
    "Age1": "25",
    "Age2": "30",
    "Age3": "35",
    "EducationAge": "23",
    "SuccessorTrusteeName": "Corporate Trustee LLC",
    "UltimateBeneficiary": "United Way",
    "WitnessOneName": "Witness One",
    "WitnessTwoName": "Witness Two",
    "DisinheritedPersonName": "None",
}

SPOUSE_FALLBACK = "my spouse"
CHILDREN_FALLBACK = "my children"
UNKNOWN_PARENT = "Unknown parent"
UNNAMED_PERSON = "Unnamed Person"
UNKNOWN_CHARITY = "Unknown Charity"

# Age tokens: stored value wins, else the default
AGE_TOKENS = ("MinorTrustAge", "Age1", "Age2", "Age3", "EducationAge")

# token -> (intake field, role, index, fallback key)
# fallback key: "spouse" / "children" / a DEFAULT_TOKENS key / None
ROLE_TOKENS = (
    ("GuardianName", "GuardianName", BaseRole.GUARDIAN, 0, None),
    ("PrimaryExecutorName", "PrimaryExecutor", BaseRole.EXECUTOR, 0, "spouse"),
    ("AlternateExecutorName", "AlternateExecutor", BaseRole.EXECUTOR, 1, "children"),
    ("MinorGuardianPrimaryName", "MinorGuardianPrimary", BaseRole.GUARDIAN, 0, None),
    ("MinorGuardianAlternateName", "MinorGuardianAlternate", BaseRole.GUARDIAN, 1, None),
    ("UTMACustodianName", "UTMACustodian", BaseRole.TRUSTEE, 0, None),
    ("PetCaretakerName", "PetCaretaker", BaseRole.OTHER, 0, None),
    ("SuccessorTrusteeName", "SuccessorTrustee", BaseRole.TRUSTEE, 0, "SuccessorTrusteeName"),
    ("PrimaryBeneficiaryName", "PrimaryBeneficiary", BaseRole.BENEFICIARY, 0, "spouse"),
    ("ContingentBeneficiaryName", "ContingentBeneficiary", BaseRole.BENEFICIARY, 1, "children"),
    ("UltimateBeneficiary", "UltimateBeneficiary", BaseRole.BENEFICIARY, 2, "UltimateBeneficiary"),
    ("DefaultTangibleBeneficiary", "DefaultTangibleBeneficiary", BaseRole.BENEFICIARY, 0, "spouse"),
    ("PersonalEffectsBeneficiaries", "PersonalEffectsBeneficiaries", BaseRole.BENEFICIARY, 0, "children"),
    ("DigitalAssetsBeneficiary", "DigitalAssetsBeneficiary", BaseRole.BENEFICIARY, 0, "spouse"),
    ("BeneficiaryName", "GiftBeneficiary", BaseRole.BENEFICIARY, 0, None),
    ("WitnessOneName", "WitnessOne", BaseRole.WITNESS, 0, "WitnessOneName"),
    ("WitnessTwoName", "WitnessTwo", BaseRole.WITNESS, 1, "WitnessTwoName"),
)


def entity_name(entity: Optional[Entity]) -> str:
    if entity is None:
        return ""
    if isinstance(entity, Organization):
        return entity.name.strip()
    return resolve_name(entity)


def _scalar_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Intake values usable directly as tokens (lists and objects excluded)."""
    return {
        key: value for key, value in fields.items()
        if isinstance(value, (str, int, float)) and not isinstance(value, bool)
    }


class TokenDeriver:
    """
    Derives the token map for one snapshot.

    A deriver is bound to a single snapshot; construct one per derivation.
    """

    def __init__(self, snapshot: IntakeSnapshot):
        self.snapshot = snapshot
        self.by_id = snapshot.by_id

        spouses = snapshot.people_with_role(BaseRole.SPOUSE)
        partners = snapshot.people_with_role(BaseRole.PARTNER)
        formers = snapshot.people_with_role(BaseRole.FORMER_SPOUSE)
        self.spouse = spouses[0] if spouses else None
        self.partner = partners[0] if partners else None
        self.former_spouse = formers[0] if formers else None

        self.client_children = client_children(snapshot)
        self.step_children = children_of_type(snapshot, ChildRelationship.STEP_CHILD)
        self.adopted_children = children_of_type(snapshot, ChildRelationship.ADOPTED)
        self.art_children = children_of_type(snapshot, ChildRelationship.ART)
        self.prior_children = prior_children(snapshot)
        self.current_children = current_spouse_children(snapshot)

        self.spouse_name = resolve_name(self.spouse) if self.spouse else SPOUSE_FALLBACK
        self.children_text = inline_with_and(self._names(self.client_children)) or CHILDREN_FALLBACK

    # -------------------------------------------------------------------------
    # Lookup helpers
    # -------------------------------------------------------------------------

    def _names(self, people: Sequence[Person]) -> List[str]:
        return [resolve_name(person) for person in people]

    def _entity(self, value: Any) -> Optional[Entity]:
        # Raw intake values may be lists or objects; only string ids are looked up
        if not isinstance(value, str) or not value:
            return None
        return self.by_id.get(value)

    def _fallback(self, key: Optional[str]) -> Optional[str]:
        if key is None:
            return None
        if key == "spouse":
            return self.spouse_name
        if key == "children":
            return self.children_text
        return DEFAULT_TOKENS.get(key)

    def person_name(
        self,
        field_name: str,
        role: Union[BaseRole, str],
        index: int = 0,
        fallback: Optional[str] = None,
    ) -> Optional[str]:
        """
        Manual field value (resolved when it is an entity id), else the
        index-th holder of the role, else the fallback.
        """
        value = self.snapshot.text(field_name)
        if value:
            entity = self.by_id.get(value)
            if entity is not None:
                return entity_name(entity) or value
            return value
        holders = self.snapshot.people_with_role(role)
        if index < len(holders):
            return resolve_name(holders[index])
        return fallback

    def _referenced_names(self, key: str, id_field: str = "personId") -> List[str]:
        """Names of the people referenced by a list of {personId} entries."""
        names = []
        for entry in self.snapshot.list_of(key):
            if not isinstance(entry, Mapping) or not entry.get(id_field):
                continue
            person = self._entity(entry.get(id_field))
            if person is None:
                continue
            names.append(entity_name(person) or UNNAMED_PERSON)
        return names

    def _name_list(self, values: Sequence[Any]) -> List[str]:
        """Entity ids become names; other non-empty values pass through."""
        names = []
        for value in values:
            if not value:
                continue
            entity = self._entity(value)
            names.append(entity_name(entity) if entity is not None else str(value))
        return [name for name in names if name]

    # -------------------------------------------------------------------------
    # Token groups
    # -------------------------------------------------------------------------

    def client_tokens(self) -> Dict[str, Any]:
        snapshot = self.snapshot
        client = snapshot.client
        full_name = resolve_name(client) or None
        middle = client.middle.strip()
        middle_formatted = middle
        if middle and client.middle_initial_only:
            middle_formatted = f"{middle[0].upper()}."

        address = client.address
        address_inline = inline([address.street1, address.street2, address.city]) or None

        return {
            "ClientFullName": full_name,
            "TestatorFullName": full_name,
            "ClientMiddleName": middle,
            "ClientMiddleNameFormatted": middle_formatted,
            "ClientSuffix": client.suffix.strip(),
            "ClientAddressInline": address_inline,
            "ClientCity": address.city or None,
            "City": address.city or None,
            "DomicileCounty": address.county or None,
            "County": address.county or None,
            "DomicileState": address.state or None,
            "State": address.state or None,
            "ClientZip": address.zip_code or None,
            "ZipCode": address.zip_code or None,
            "idMode": snapshot.text("IdMode", "Simple").lower(),
        }

    def family_tokens(self) -> Dict[str, Any]:
        snapshot = self.snapshot
        client_names = self._names(self.client_children)
        children_bullet = bullet(client_names)
        art_only = bool(self.art_children) and len(self.art_children) == len(self.client_children)
        selected_children = bullet(self._names(self.art_children)) if art_only else children_bullet

        partner_name = resolve_name(self.partner) if self.partner else ""
        former_name = resolve_name(self.former_spouse) if self.former_spouse else ""

        disinherited = snapshot.people_with_role(BaseRole.DISINHERITED)

        if self.spouse is not None:
            term = "spouse"
            partner_full_name = self.spouse_name
        elif self.partner is not None:
            term = "partner"
            partner_full_name = partner_name or DEFAULT_TOKENS["SpousePartnerFullName"]
        else:
            term = DEFAULT_TOKENS["SpousePartnerTerm"]
            partner_full_name = DEFAULT_TOKENS["SpousePartnerFullName"]

        # Manual intake values win over entity lookups, role fallbacks and defaults
        manual = snapshot.text
        return {
            "SpouseFullName": manual("SpouseFullName") or self.spouse_name,
            "PartnerFullName": manual("PartnerFullName") or partner_name or None,
            "FormerSpouseFullName": manual("FormerSpouseFullName") or former_name or None,
            "ChildrenList": selected_children or self.children_text,
            "ChildrenListInline": inline_with_and(client_names) or self.children_text,
            "StepchildrenList": bullet(self._names(self.step_children)),
            "StepchildrenListInline": inline(self._names(self.step_children)),
            "PriorChildrenList": bullet(self._names(self.prior_children)),
            "OtherParentNamesList": self.other_parent_names(),
            "AdoptedChildrenList": bullet(self._names(self.adopted_children)),
            "CurrentChildrenList": bullet(self._names(self.current_children)) or selected_children,
            "DisinheritedPersonName": manual("DisinheritedPersonName") or (
                resolve_name(disinherited[0]) if disinherited else DEFAULT_TOKENS["DisinheritedPersonName"]
            ),
            "RelationshipStatusDescriptor": manual("RelationshipStatusDescriptor") or (
                snapshot.relationship or DEFAULT_TOKENS["RelationshipStatusDescriptor"]
            ),
            "SpousePartnerTerm": manual("SpousePartnerTerm") or term,
            "SpousePartnerFullName": manual("SpousePartnerFullName") or partner_full_name,
        }

    def other_parent_names(self) -> str:
        """" (with X)" naming the other parents of prior children; empty when none."""
        parent_ids = list(dict.fromkeys(
            child.other_parent for child in self.prior_children if child.other_parent
        ))
        names = [entity_name(self.by_id.get(pid)) or UNKNOWN_PARENT for pid in parent_ids]
        if not names:
            return ""
        return f" (with {inline_with_and(names)})"

    def charity_tokens(self) -> Dict[str, Any]:
        return {
            "CharityName": self.charity_name(),
            "BackupCharitiesList": self.backup_charities_list(),
            "CorporateFiduciaryName": self.corporate_fiduciary_name(),
        }

    def charity_name(self) -> str:
        charity_id = self.snapshot.text("ResiduaryCharity")
        charity = self.by_id.get(charity_id) if charity_id else None
        if charity is None:
            return placeholder("CharityName")
        if isinstance(charity, Organization):
            return organization_display_name(charity)
        return resolve_name(charity) or "Unnamed Charity"

    def backup_charities_list(self) -> str:
        entries = [e for e in self.snapshot.list_of("BackupCharities") if isinstance(e, Mapping)]
        if not entries:
            return placeholder("BackupCharitiesList")

        items = []
        for entry in entries:
            share = ""
            if entry.get("percentage"):
                share = f" {format_charity_percentage(entry.get('percentage'), len(entries))}"
            charity_id = entry.get("charityId")
            if not charity_id:
                items.append(f"{SELECT_CHARITY_MARKER}{share}")
                continue
            charity = self._entity(charity_id)
            if charity is None:
                name = UNKNOWN_CHARITY
            elif isinstance(charity, Organization):
                name = charity.name.strip() or "Unnamed Charity"
            else:
                name = resolve_name(charity) or "Unnamed Charity"
            items.append(f"{name}{share}")
        return "; ".join(items)

    def corporate_fiduciary_name(self) -> str:
        corp_id = self.snapshot.text("CorporateFiduciaryName")
        corp = self.by_id.get(corp_id) if corp_id else None
        if corp is None:
            return placeholder("CorporateFiduciaryName")
        if isinstance(corp, Organization):
            return corp.name.strip() or "Unnamed Corporate Fiduciary"
        return resolve_name(corp) or "Unnamed Corporate Fiduciary"

    def executor_tokens(self, role_tokens: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Alternate executor names and the sentences nominating them.

        The clause tokens are SUPPRESSED (rendered as nothing) when there is
        no alternate to nominate.
        """
        entries = [e for e in self.snapshot.list_of("AlternateExecutors") if isinstance(e, Mapping)]
        primary_name = role_tokens.get("PrimaryExecutorName") or self.spouse_name

        first_alternate = ""
        if entries and entries[0].get("personId"):
            person = self._entity(entries[0].get("personId"))
            if person is not None:
                first_alternate = entity_name(person) or UNNAMED_PERSON

        alternate_clause = SUPPRESSED
        if first_alternate:
            alternate_clause = (
                f"\n\nIf {primary_name} does not qualify or ceases to serve, "
                f"I nominate {first_alternate} to serve as Executor of this Will."
            )

        list_clause = SUPPRESSED
        if len(entries) >= 2 and first_alternate:
            later = []
            for entry in entries[1:]:
                person = self._entity(entry.get("personId"))
                if person is not None:
                    later.append(entity_name(person) or UNNAMED_PERSON)
            if later:
                list_clause = (
                    f"\n\nIf neither {primary_name} nor {first_alternate} qualify or cease to serve, "
                    f"I nominate {', then '.join(later)} to serve in the order named."
                )

        return {
            "ExecutorAlternate1": first_alternate,
            "ExecutorAlternate1Clause": alternate_clause,
            "ExecutorAlternateListClause": list_clause,
            "AlternateBeneficiaries": self.alternate_beneficiaries(),
        }

    def alternate_beneficiaries(self) -> str:
        names = self._referenced_names("AlternateBeneficiaries")
        if not names:
            return placeholder("AlternateBeneficiaries")
        if len(names) == 1:
            return names[0]
        return f"{', '.join(names[:-1])} & {names[-1]}, in equal shares"

    def role_tokens(self) -> Dict[str, Any]:
        return {
            token: self.person_name(field_name, role, index, self._fallback(fallback))
            for token, field_name, role, index, fallback in ROLE_TOKENS
        }

    def trust_tokens(self) -> Dict[str, Any]:
        snapshot = self.snapshot
        tokens: Dict[str, Any] = {}
        for key in AGE_TOKENS:
            value = snapshot.get(key)
            tokens[key] = value if value not in (None, "") else DEFAULT_TOKENS.get(key)

        tokens["DollarThreshold"] = with_dollar_sign(snapshot.get("DollarThreshold")) or None
        tokens["DollarAmount"] = with_dollar_sign(snapshot.get("DollarAmount")) or None
        tokens["TrusteeName"] = self.trustee_name()
        tokens["AlternateTrusteeList"] = self._alternate_list(
            "AlternateTrusteeListOverride", "AlternateTrusteeList", BaseRole.TRUSTEE,
        )
        tokens["AlternateGuardianList"] = self._alternate_list(
            "AlternateGuardianListOverride", "AlternateGuardianList", BaseRole.GUARDIAN,
        )
        tokens["RemainderBeneficiary"] = self.remainder_beneficiary()
        return tokens

    def trustee_name(self) -> Optional[str]:
        snapshot = self.snapshot
        manual = snapshot.text("TrusteeNameManual") or snapshot.text("TrusteeName")
        if manual:
            return manual
        selected = self.by_id.get(snapshot.text("TrusteeNameSelection"))
        if selected is not None and entity_name(selected):
            return entity_name(selected)
        trustees = snapshot.people_with_role(BaseRole.TRUSTEE)
        if trustees and resolve_name(trustees[0]):
            return resolve_name(trustees[0])
        return DEFAULT_TOKENS.get("TrusteeName")

    def _alternate_list(self, override_field: str, list_field: str, role: BaseRole) -> Optional[str]:
        manual = self.snapshot.text(override_field)
        if manual:
            return manual
        selected = self._name_list(self.snapshot.list_of(list_field))
        if selected:
            return inline(selected)
        holders = self._names(self.snapshot.people_with_role(role)[1:])
        if inline(holders):
            return inline(holders)
        return DEFAULT_TOKENS.get(list_field)

    def remainder_beneficiary(self) -> Optional[str]:
        snapshot = self.snapshot
        manual = snapshot.text("RemainderBeneficiaryManual") or snapshot.text("RemainderBeneficiary")
        if manual:
            return manual
        selected = self.by_id.get(snapshot.text("RemainderBeneficiarySelection"))
        if selected is not None and entity_name(selected):
            return entity_name(selected)
        charity = self.by_id.get(snapshot.text("ResiduaryCharity"))
        if isinstance(charity, Organization) and charity.name.strip():
            return charity.name.strip()
        return DEFAULT_TOKENS.get("RemainderBeneficiary")

    def venue_tokens(self) -> Dict[str, Any]:
        snapshot = self.snapshot
        county = snapshot.text("DomicileCounty")
        state = snapshot.text("DomicileState")
        probate_county = snapshot.text("CountyForProbate") or county
        governing_state = snapshot.text("GoverningState") or state
        return {
            "CountyForProbate": probate_county or None,
            "GoverningState": governing_state or None,
            "VenueCounty": snapshot.text("VenueCounty") or probate_county or None,
            "VenueState": snapshot.text("VenueState") or governing_state or None,
        }

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def derive(self) -> Dict[str, Any]:
        """
        Full token map: static defaults, then raw intake values, then
        derived tokens (later layers win).
        """
        tokens: Dict[str, Any] = dict(DEFAULT_TOKENS)
        tokens.update(_scalar_fields(self.snapshot.fields))

        role_tokens = self.role_tokens()
        tokens.update(self.client_tokens())
        tokens.update(self.family_tokens())
        tokens.update(role_tokens)
        tokens.update(self.charity_tokens())
        tokens.update(self.executor_tokens(role_tokens))
        tokens.update(self.trust_tokens())
        tokens.update(self.venue_tokens())

        logger.debug(f"Derived {len(tokens)} tokens")
        return tokens


def derive_tokens(snapshot: IntakeSnapshot) -> Dict[str, Any]:
    """
    Convenience function to derive the token map for a snapshot.

    Args:
        snapshot: Intake snapshot

    Returns:
        Token name -> value (None for unresolved tokens)
    """
    return TokenDeriver(snapshot).derive()
