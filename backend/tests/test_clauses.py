"""
Clause Library Tests

Verifies:
1. Catalog building per layout (grouped, extras-only, flat)
2. Single-default invariant on primary clauses
3. Selection normalization: legacy ids, dedupe, one primary first
4. Normalization is a projection (resolving twice changes nothing)
5. Per-article render lists
6. Placeholder hydration keeps unresolved tokens visible
"""

import pytest

from will_engine.models import ArticleKey, Clause, ClauseCategory
from will_engine.services.clauses import (
    SUPPRESSED,
    CatalogLayout,
    SelectionResolver,
    build_catalog,
    build_library,
    executor_policy_ids,
    find_placeholders,
    hydrate_body,
    hydrate_clause,
    hydrate_clauses,
    set_default_primary,
)
from will_engine.services.intake import IntakeSnapshot


def rendered_ids(resolver, article, **intake):
    snapshot = IntakeSnapshot.from_dict(intake)
    return [clause.id for clause in resolver.clauses_for_article(article, snapshot)]


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def resolver(library):
    return SelectionResolver(library)


# =============================================================================
# CATALOG BUILDING
# =============================================================================

class TestCatalogBuilding:
    """Tests for build_catalog / build_library"""

    def test_grouped_catalog_categories(self, library):
        debts = library.catalog(ArticleKey.DEBTS)
        assert debts.primary_ids == ("debts.primary.standard", "debts.primary.apportioned")
        assert debts.addon_ids == ("debts.addon.mortgage",)
        assert [c.id for c in debts.boilerplate] == ["debts.boiler.definitions"]

    def test_flagged_default_is_the_only_default(self, library):
        debts = library.catalog(ArticleKey.DEBTS)
        assert debts.default_primary_id == "debts.primary.apportioned"
        assert [c.id for c in debts.primary if c.default] == ["debts.primary.apportioned"]

    def test_configured_default_clears_siblings(self, catalog_documents):
        document = dict(catalog_documents["debts_taxes"], default_primary="debts.primary.standard")
        debts = build_catalog(ArticleKey.DEBTS, document)
        assert [c.id for c in debts.primary if c.default] == ["debts.primary.standard"]

    def test_set_default_primary_moves_the_flag(self, library):
        debts = set_default_primary(library.catalog(ArticleKey.DEBTS), "debts.primary.standard")
        assert debts.default_primary_id == "debts.primary.standard"
        assert [c.id for c in debts.primary if c.default] == ["debts.primary.standard"]

    def test_set_default_primary_ignores_unknown_ids(self, library):
        debts = library.catalog(ArticleKey.DEBTS)
        assert set_default_primary(debts, "debts.addon.mortgage") is debts
        assert set_default_primary(debts, None) is debts

    def test_first_primary_is_default_when_none_flagged(self, library):
        trusts = library.catalog(ArticleKey.TRUSTS)
        assert trusts.default_primary_id == "trusts.primary.minor"

    def test_extras_only_drops_primaries(self):
        document = {
            "primary_select_one": [{"id": "powers.primary.broad"}],
            "extras_multi": [{"id": "powers.addon.sell"}],
        }
        powers = build_catalog(ArticleKey.POWERS, document)
        assert powers.primary == ()
        assert powers.addon_ids == ("powers.addon.sell",)

    def test_flat_catalog_keeps_source_order(self, library):
        testator = library.catalog(ArticleKey.TESTATOR)
        assert [c.id for c in testator.clauses][:3] == [
            "testator.declaration.will_title_simple",
            "testator.declaration.will_title_expanded",
            "testator.revocation.prior_wills",
        ]
        assert testator.find("testator.revocation.prior_wills").category == ClauseCategory.BOILERPLATE
        assert testator.default_primary_id is None

    def test_records_without_id_are_skipped(self):
        document = {"extras_multi": [{"body": "orphan"}, "not a record", {"id": "misc.addon.ok"}]}
        misc = build_catalog(ArticleKey.MISC, document)
        assert misc.addon_ids == ("misc.addon.ok",)

    def test_malformed_document_degrades_to_empty(self):
        assert build_catalog(ArticleKey.DEBTS, "garbage").is_empty
        broken = build_catalog(ArticleKey.DEBTS, {"primary_select_one": "oops"})
        assert broken.is_empty

    def test_missing_documents_leave_other_articles_intact(self, catalog_documents):
        del catalog_documents["gifts"]
        library = build_library(catalog_documents)
        assert library.catalog(ArticleKey.GIFTS).is_empty
        assert not library.catalog(ArticleKey.DEBTS).is_empty

    def test_legacy_map_first_writer_wins(self):
        document = {
            "primary_select_one": [
                {"id": "debts.primary.a", "legacyIds": ["old"]},
                {"id": "debts.primary.b", "legacyIds": ["old"]},
            ],
        }
        debts = build_catalog(ArticleKey.DEBTS, document, CatalogLayout.GROUPED)
        assert debts.resolve_legacy_id("old") == "debts.primary.a"
        assert debts.resolve_legacy_id("unknown") == "unknown"


# =============================================================================
# SELECTION NORMALIZATION
# =============================================================================

class TestSelectionResolution:
    """Tests for SelectionResolver.resolve"""

    def test_legacy_debts_id_resolves_to_standard_first(self, resolver):
        result = resolver.resolve(ArticleKey.DEBTS, ["debts.addon.mortgage", "debts_standard"])
        assert result[0] == "debts.primary.standard"
        assert result == ("debts.primary.standard", "debts.addon.mortgage")

    def test_first_primary_wins(self, resolver):
        result = resolver.resolve(
            ArticleKey.DEBTS, ["debts.primary.apportioned", "debts.primary.standard"],
        )
        assert result == ("debts.primary.apportioned",)

    def test_flagged_default_when_no_primary_stored(self, resolver):
        result = resolver.resolve(ArticleKey.DEBTS, ["debts.addon.mortgage", "debts.addon.mortgage"])
        assert result == ("debts.primary.apportioned", "debts.addon.mortgage")

    def test_unknown_ids_dropped_for_primary_articles(self, resolver):
        assert resolver.resolve(ArticleKey.DEBTS, ["bogus"]) == ("debts.primary.apportioned",)

    def test_addon_only_keeps_known_addons(self, resolver):
        result = resolver.resolve(ArticleKey.POWERS, ["powers.addon.invest", "bogus", "powers.addon.invest"])
        assert result == ("powers.addon.invest",)

    def test_free_articles_pass_unknown_ids_through(self, resolver):
        result = resolver.resolve(
            ArticleKey.FAMILY, ["x", "x", "family.statement.widowed_children"],
        )
        assert result == ("x", "family.statement.widowed_children")

    def test_free_articles_keep_only_the_first_primary(self, resolver):
        result = resolver.resolve(ArticleKey.TESTATOR, [
            "testator.addon.aka",
            "testator.declaration.will_title_expanded",
            "custom.note",
            "testator.declaration.will_title_simple",
        ])
        assert result == (
            "testator.declaration.will_title_expanded", "testator.addon.aka", "custom.note",
        )

    @pytest.mark.parametrize("article, raw", [
        (ArticleKey.DEBTS, ["debts.standard", "debts.addon.mortgage", "debts.primary.apportioned"]),
        (ArticleKey.DEBTS, []),
        (ArticleKey.POWERS, ["powers.addon.sell", "nope"]),
        (ArticleKey.TRUSTS, ["trusts.boiler.spendthrift"]),
        (ArticleKey.FAMILY, ["family.statement.married_children", "custom"]),
    ])
    def test_resolve_is_a_projection(self, resolver, article, raw):
        once = resolver.resolve(article, raw)
        assert resolver.resolve(article, once) == once

    @pytest.mark.parametrize("article, raw", [
        (ArticleKey.DEBTS, ["debts.addon.mortgage", "debts.primary.standard", "debts.primary.apportioned"]),
        (ArticleKey.DEBTS, ["debts.standard", "debts_standard"]),
        (ArticleKey.DEBTS, []),
        (ArticleKey.TESTATOR, [
            "testator.declaration.will_title_expanded", "testator.declaration.will_title_simple",
        ]),
        (ArticleKey.TESTATOR, ["testator.addon.aka", "testator.declaration.will_title_simple"]),
        (ArticleKey.EXECUTORS, ["exec.bond.waived", "exec.primary.nomination", "exec.primary.nomination"]),
        (ArticleKey.SIGNATURE, ["sig.primary.attestation"]),
        (ArticleKey.POWERS, ["powers.addon.sell"]),
    ])
    def test_at_most_one_primary_and_it_is_first(self, resolver, library, article, raw):
        primary_ids = set(library.catalog(article).primary_ids)
        result = resolver.resolve(article, raw)
        primaries = [clause_id for clause_id in result if clause_id in primary_ids]
        assert len(primaries) <= 1
        if primaries:
            assert result[0] == primaries[0]

    def test_ensure_default_primary_prepends_primary(self, resolver):
        result = resolver.ensure_default_primary_selection(ArticleKey.DEBTS, ["debts.addon.mortgage"])
        assert result == ("debts.primary.apportioned", "debts.addon.mortgage")

    def test_ensure_default_primary_keeps_explicit_primary(self, resolver):
        raw = ["debts_standard", "debts.addon.mortgage"]
        assert resolver.ensure_default_primary_selection(ArticleKey.DEBTS, raw) == tuple(raw)

    def test_ensure_default_primary_without_primaries(self, resolver):
        raw = ["powers.addon.sell"]
        assert resolver.ensure_default_primary_selection(ArticleKey.POWERS, raw) == tuple(raw)


# =============================================================================
# RENDER LISTS
# =============================================================================

class TestRenderLists:
    """Tests for SelectionResolver.clauses_for_article"""

    def test_testator_fixed_clauses(self, resolver):
        ids = rendered_ids(
            resolver, ArticleKey.TESTATOR,
            IdMode="Expanded",
            IncludeCapacity="Yes",
            SelectedClauses={"testator": ["testator.addon.aka", "testator.declaration.will_title_simple"]},
        )
        assert ids == [
            "testator.declaration.will_title_expanded",
            "testator.revocation.prior_wills",
            "testator.intent.independence",
            "testator.addon.aka",
        ]

    def test_testator_defaults_to_simple_title(self, resolver):
        assert rendered_ids(resolver, ArticleKey.TESTATOR) == [
            "testator.declaration.will_title_simple",
            "testator.revocation.prior_wills",
        ]

    def test_family_uses_suggestions_when_nothing_stored(self, resolver):
        ids = rendered_ids(
            resolver, ArticleKey.FAMILY,
            RelationshipStatus="Widowed",
            NameBank=[{"id": "c1", "primaryRole": "Child"}],
        )
        assert ids == ["family.statement.widowed_children"]

    def test_family_skips_unknown_ids(self, resolver):
        ids = rendered_ids(
            resolver, ArticleKey.FAMILY,
            SelectedClauses={"family": ["family.statement.unknown", "family.statement.married_children"]},
        )
        assert ids == ["family.statement.married_children"]

    def test_primary_article_renders_boilerplate_first(self, resolver):
        assert rendered_ids(resolver, ArticleKey.DEBTS) == [
            "debts.boiler.definitions",
            "debts.primary.apportioned",
        ]

    def test_trusts_render_boilerplate_last(self, resolver):
        assert rendered_ids(resolver, ArticleKey.TRUSTS) == [
            "trusts.primary.minor",
            "trusts.boiler.spendthrift",
        ]

    def test_addon_only_renders_all_addons_until_a_selection_is_stored(self, resolver):
        assert rendered_ids(resolver, ArticleKey.MISC) == [
            "misc.boiler.headings",
            "misc.addon.survivorship",
            "misc.addon.no_contest",
        ]
        assert rendered_ids(resolver, ArticleKey.MISC, SelectedClauses={"misc": []}) == [
            "misc.boiler.headings",
        ]
        assert rendered_ids(
            resolver, ArticleKey.MISC, SelectedClauses={"misc": ["misc.addon.no_contest"]},
        ) == ["misc.boiler.headings", "misc.addon.no_contest"]

    def test_executors_union_policy_clauses(self, resolver):
        assert rendered_ids(resolver, ArticleKey.EXECUTORS) == [
            "exec.primary.nomination",
            "exec.bond.waived",
            "exec.compensation.allowed",
            "exec.voting.majority",
        ]
        ids = rendered_ids(
            resolver, ArticleKey.EXECUTORS,
            BondPolicy="Bond required",
            SelectedClauses={"executors": ["exec.addon.ancillary"]},
        )
        assert ids == [
            "exec.primary.nomination",
            "exec.bond.required",
            "exec.compensation.allowed",
            "exec.voting.majority",
            "exec.addon.ancillary",
        ]

    def test_unknown_policy_value_uses_default(self):
        ids = executor_policy_ids({"BondPolicy": "Something else", "CoExecutorsActBy": "Unanimous"})
        assert ids == ("exec.bond.waived", "exec.compensation.allowed", "exec.voting.unanimous")

    def test_signature_always_includes_primary(self, resolver):
        assert rendered_ids(resolver, ArticleKey.SIGNATURE) == ["sig.primary.attestation"]
        ids = rendered_ids(
            resolver, ArticleKey.SIGNATURE, SelectedClauses={"signature": ["sig.addon.self_proving"]},
        )
        assert ids == ["sig.primary.attestation", "sig.addon.self_proving"]


# =============================================================================
# HYDRATION
# =============================================================================

class TestHydration:
    """Tests for the template hydrator"""

    def test_unresolved_tokens_keep_placeholder(self):
        body = "I give [[Amount]] to [[BeneficiaryName]] of [[City]]."
        tokens = {"Amount": "$500", "BeneficiaryName": "", "City": None}
        assert hydrate_body(body, tokens) == "I give $500 to [[BeneficiaryName]] of [[City]]."

    def test_suppressed_token_renders_as_nothing(self):
        clause = Clause(
            id="exec.primary.nomination",
            category=ClauseCategory.PRIMARY,
            body="I nominate Sam.[[ExecutorAlternate1Clause]]",
        )
        assert hydrate_clause(clause, {"ExecutorAlternate1Clause": SUPPRESSED}) == "I nominate Sam."

    def test_clauses_joined_by_blank_lines(self):
        clauses = [
            Clause(id="a", category=ClauseCategory.ADDON, body="First."),
            Clause(id="b", category=ClauseCategory.ADDON, body=""),
            Clause(id="c", category=ClauseCategory.ADDON, body="Second."),
        ]
        assert hydrate_clauses(clauses, {}) == "First.\n\nSecond."

    def test_find_placeholders_in_order(self):
        assert find_placeholders("[[B]] [[A]] [[B]]") == ["B", "A"]
