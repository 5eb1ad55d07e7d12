"""
Name Bank Tests

Verifies:
1. Normalization is idempotent and migrates legacy child fields
2. Badge lists never repeat the primary role
3. Name resolution skips excluded parts without double spaces
4. Required Spouse/Child entries and children counts are proposed, not applied
5. The intake snapshot treats the empty-dropdown marker as empty
"""

import pytest

from will_engine.models import (
    BaseRole,
    ChildRelationship,
    CLIENT,
    EntityKind,
    Organization,
    Person,
)
from will_engine.services.intake import IntakeSnapshot, SELECT_PLACEHOLDER
from will_engine.services.name_bank import (
    PARENT_NOT_FOUND_LABEL,
    UNASSIGNED_LABEL,
    build_client_node,
    create_person,
    describe_parent,
    entity_from_dict,
    entity_to_dict,
    ensure_required_entities,
    link_co_parent,
    normalize_person,
    resolve_name,
    sync_children_count,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def messy_child():
    """Child record as an older intake would have stored it."""
    return Person(
        id="child-1",
        first="Ava",
        last="Stone",
        primary_role="Child",
        badges=("Child", "Guardian", " ", "Guardian"),
        child_relationship="adopted",
        legacy_other_parent="partner-9",
    )


@pytest.fixture
def client_fields():
    return {
        "ClientFirstName": "Maria",
        "ClientMiddleName": "Elena",
        "ClientMiddleToggle": True,
        "ClientMiddleInitialOnly": True,
        "ClientLastName": "Lopez",
        "ClientDOB": "1960-03-07",
        "DomicileCounty": "Travis",
        "DomicileState": "Texas",
    }


# =============================================================================
# NORMALIZATION
# =============================================================================

class TestNormalization:
    """Tests for normalize_person / entity_from_dict"""

    def test_normalize_is_idempotent(self, messy_child):
        once = normalize_person(messy_child)
        assert normalize_person(once) == once

    def test_legacy_parent_moves_to_parent_b(self, messy_child):
        child = normalize_person(messy_child)
        assert child.parent_a == CLIENT
        assert child.parent_b == "partner-9"
        assert child.legacy_other_parent is None

    def test_badges_drop_primary_blanks_and_duplicates(self, messy_child):
        child = normalize_person(messy_child)
        assert child.primary_role == BaseRole.CHILD
        assert child.badges == ("Guardian",)

    def test_relationship_defaults_and_case(self, messy_child):
        child = normalize_person(messy_child)
        assert child.child_relationship == ChildRelationship.ADOPTED
        assert child.treat_as_biological is True

    def test_step_child_is_not_linked_to_client(self):
        child = entity_from_dict({
            "id": "step-1",
            "primaryRole": "Child",
            "childRelationship": "Step-child",
            "childParentAId": "__CLIENT__",
            "childParentBId": "spouse-1",
        })
        assert child.parent_a is None
        assert child.parent_b == "spouse-1"
        assert child.is_step_child

    def test_unknown_primary_falls_back_to_first_role_badge(self):
        person = entity_from_dict({"id": "p1", "primaryRole": "Wizard", "roles": ["Trustee"]})
        assert person.primary_role == BaseRole.TRUSTEE
        assert person.badges == ()

    def test_non_child_has_no_child_fields(self):
        person = entity_from_dict({
            "id": "p2",
            "primaryRole": "Executor",
            "childParentAId": "__CLIENT__",
            "childRelationship": "Adopted",
        })
        assert person.child_relationship is None
        assert person.parent_a is None

    def test_charity_record_becomes_organization(self):
        org = entity_from_dict({"id": "org-1", "entityType": "charity", "charityName": "Red Cross"})
        assert isinstance(org, Organization)
        assert org.kind == EntityKind.CHARITY
        assert resolve_name(org) == "Red Cross"

    def test_missing_id_gets_generated(self):
        person = entity_from_dict({"first": "No", "last": "Id"})
        assert person.id

    def test_client_parent_is_written_as_wire_id(self):
        data = entity_to_dict(create_person(BaseRole.CHILD, id="c9"))
        assert data["childParentAId"] == "__CLIENT__"
        assert data["childRelationship"] == "Biological"


# =============================================================================
# NAMING
# =============================================================================

class TestResolveName:
    """Tests for resolve_name"""

    def test_middle_initial_only(self):
        person = Person(first="John", middle="Quincy", last="Adams", middle_initial_only=True)
        assert resolve_name(person) == "John Q. Adams"

    def test_middle_initial_requires_middle_toggle(self):
        person = Person(
            first="John", middle="Quincy", last="Adams",
            middle_enabled=False, middle_initial_only=True,
        )
        assert resolve_name(person) == "John Adams"

    def test_excluded_suffix_and_empty_parts(self):
        person = Person(first="  Ann ", middle="", last="Lee", suffix="Jr.", suffix_enabled=False)
        assert resolve_name(person) == "Ann Lee"

    def test_first_name_toggle(self):
        person = Person(first="Ann", last="Lee", first_enabled=False)
        assert resolve_name(person) == "Lee"

    def test_client_node_from_fields(self, client_fields):
        client = build_client_node(client_fields)
        assert resolve_name(client) == "Maria E. Lopez"
        assert (client.dob_month, client.dob_day, client.dob_year) == ("March", "7", "1960")
        assert client.address.county == "Travis"

    def test_describe_parent_labels(self, client_fields):
        client = build_client_node(client_fields)
        spouse = Person(id="s1", first="Sam", last="Lopez", primary_role=BaseRole.SPOUSE)
        by_id = {"s1": spouse}

        assert describe_parent(None, client, by_id) == UNASSIGNED_LABEL
        assert describe_parent(CLIENT, client, by_id) == "Maria E. Lopez"
        assert describe_parent("s1", client, by_id) == "Sam Lopez"
        assert describe_parent("ghost", client, by_id) == PARENT_NOT_FOUND_LABEL


# =============================================================================
# REQUIRED ENTITIES
# =============================================================================

class TestRequiredEntities:
    """Tests for ensure_required_entities / sync_children_count / link_co_parent"""

    def test_married_with_children_adds_spouse_and_children(self):
        fields = {"RelationshipStatus": "Married", "HasChildren": "Yes", "ChildrenCount": "2"}
        entities, changed = ensure_required_entities(fields, [])

        assert changed is True
        assert [e.primary_role for e in entities] == [
            BaseRole.SPOUSE, BaseRole.CHILD, BaseRole.CHILD,
        ]
        assert all(e.parent_a == CLIENT for e in entities[1:])

    def test_declared_children_without_count_adds_one(self):
        entities, _ = ensure_required_entities({"HasChildren": "Yes"}, [])
        assert len(entities) == 1
        assert entities[0].is_child

    def test_satisfied_intake_is_unchanged(self):
        spouse = create_person(BaseRole.SPOUSE, id="s1")
        child = create_person(BaseRole.CHILD, id="c1")
        fields = {"RelationshipStatus": "married", "HasChildren": "Yes", "ChildrenCount": "1"}

        entities, changed = ensure_required_entities(fields, [spouse, child])
        assert changed is False
        assert [e.id for e in entities] == ["s1", "c1"]

    def test_sorting_spouse_first_counts_as_change(self):
        child = create_person(BaseRole.CHILD, id="c1")
        spouse = create_person(BaseRole.SPOUSE, id="s1")

        entities, changed = ensure_required_entities({}, [child, spouse])
        assert changed is True
        assert [e.id for e in entities] == ["s1", "c1"]

    def test_sync_children_count(self):
        children = [create_person(BaseRole.CHILD), create_person(BaseRole.CHILD)]
        updates = sync_children_count({"ChildrenCount": "0", "HasChildren": "No"}, children)
        assert updates == {"ChildrenCount": 2, "HasChildren": "Yes"}

    def test_sync_children_count_no_change(self):
        children = [create_person(BaseRole.CHILD)]
        assert sync_children_count({"ChildrenCount": "1", "HasChildren": "Yes"}, children) == {}

    def test_link_co_parent_fills_empty_slot(self):
        child = create_person(BaseRole.CHILD, id="c1")
        entities = link_co_parent([child], "c1")

        assert len(entities) == 2
        linked, co_parent = entities
        assert linked.parent_a == CLIENT
        assert linked.parent_b == co_parent.id
        assert co_parent.primary_role == BaseRole.OTHER
        assert co_parent.has_role(BaseRole.FORMER_SPOUSE)

    def test_link_co_parent_unknown_child(self):
        child = create_person(BaseRole.CHILD, id="c1")
        assert link_co_parent([child], "nope") == [child]


# =============================================================================
# INTAKE SNAPSHOT
# =============================================================================

class TestIntakeSnapshot:
    """Tests for IntakeSnapshot"""

    def test_select_placeholder_reads_as_empty(self):
        snapshot = IntakeSnapshot.from_dict({"BondPolicy": SELECT_PLACEHOLDER})
        assert snapshot.text("BondPolicy") == ""
        assert snapshot.text("BondPolicy", "Bond waived") == "Bond waived"

    def test_entities_and_selections_are_split_out(self):
        snapshot = IntakeSnapshot.from_dict({
            "RelationshipStatus": "Married",
            "NameBank": [{"id": "s1", "primaryRole": "Spouse", "first": "Sam"}],
            "SelectedClauses": {"debts": "debts.primary.standard", "misc": []},
        })
        assert "NameBank" not in snapshot.fields
        assert snapshot.entity("s1").first == "Sam"
        assert snapshot.selection("debts") == ("debts.primary.standard",)
        assert snapshot.has_selection("misc")
        assert not snapshot.has_selection("powers")

    def test_with_selection_returns_new_snapshot(self):
        snapshot = IntakeSnapshot.from_dict({})
        updated = snapshot.with_selection("family", ["family.statement.married_children"])
        assert snapshot.selection("family") == ()
        assert updated.selection("family") == ("family.statement.married_children",)
