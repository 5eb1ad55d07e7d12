"""
Selection Resolver

Normalizes persisted per-article selections against the frozen library and
decides which clauses each article renders.

Normalization (resolve):
1. Legacy ids mapped forward (unknown ids pass through)
2. Duplicates dropped, first occurrence kept
3. Addon-only articles keep known addon ids only
4. Primary articles: first known primary in the list, else the flagged
   default, else the configured default, else the first primary
5. Output: primary first, then addons in persisted order

Boilerplate is never part of a selection; it is added at render time.
"""

from __future__ import annotations
import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from ...models.clauses import (
    ArticleCatalog,
    ArticleKey,
    Clause,
    ClauseLibrary,
    SelectionMode,
)
from ..intake import IntakeSnapshot
from ..family.suggestions import suggest_family_clauses
from .library import article_config

logger = logging.getLogger(__name__)


# =============================================================================
# EXECUTOR POLICY SWITCHES
# =============================================================================

BOND_POLICY_CLAUSES = {
    "Bond waived": "exec.bond.waived",
    "Bond required": "exec.bond.required",
    "Court discretion": "exec.bond.court_discretion",
}
COMPENSATION_POLICY_CLAUSES = {
    "Reasonable compensation allowed": "exec.compensation.allowed",
    "No extra compensation (expenses only)": "exec.compensation.waived",
}
VOTING_POLICY_CLAUSES = {
    "Majority": "exec.voting.majority",
    "Unanimous": "exec.voting.unanimous",
    "Any one acting alone": "exec.voting.independent",
}

# (intake field, clause map, default policy)
EXECUTOR_POLICIES = (
    ("BondPolicy", BOND_POLICY_CLAUSES, "Bond waived"),
    ("CompensationPolicy", COMPENSATION_POLICY_CLAUSES, "Reasonable compensation allowed"),
    ("CoExecutorsActBy", VOTING_POLICY_CLAUSES, "Majority"),
)

# Testator declaration / fixed clauses
TESTATOR_TITLE_SIMPLE = "testator.declaration.will_title_simple"
TESTATOR_TITLE_EXPANDED = "testator.declaration.will_title_expanded"
TESTATOR_TITLE_PREFIX = "testator.declaration.will_title"
TESTATOR_REVOCATION = "testator.revocation.prior_wills"
TESTATOR_CAPACITY = "testator.intent.independence"


def executor_policy_ids(fields: Mapping[str, Any]) -> Tuple[str, ...]:
    """Bond, compensation and voting clause ids; unknown policy values use the default."""
    ids = []
    for field_name, clause_map, default_policy in EXECUTOR_POLICIES:
        policy = fields.get(field_name) or default_policy
        ids.append(clause_map.get(policy, clause_map[default_policy]))
    return tuple(ids)


def dedupe(ids: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(i for i in ids if i))


class SelectionResolver:
    """
    Resolves selections and render lists for every article.

    Holds only the frozen library; every method is a pure function of its
    arguments.
    """

    def __init__(self, library: ClauseLibrary):
        self.library = library

    # -------------------------------------------------------------------------
    # Selection normalization
    # -------------------------------------------------------------------------

    def legacy_resolve(self, article: ArticleKey, raw: Iterable[str]) -> Tuple[str, ...]:
        catalog = self.library.catalog(article)
        return tuple(catalog.resolve_legacy_id(clause_id) for clause_id in raw if clause_id)

    def choose_primary(self, catalog: ArticleCatalog, ids: Sequence[str]) -> Optional[str]:
        primary_ids = catalog.primary_ids
        for clause_id in ids:
            if clause_id in primary_ids:
                return clause_id
        flagged = catalog.flagged_default()
        if flagged is not None:
            return flagged.id
        if catalog.default_primary_id in primary_ids:
            return catalog.default_primary_id
        if primary_ids:
            return primary_ids[0]
        return None

    def resolve(self, article: ArticleKey, raw: Iterable[str]) -> Tuple[str, ...]:
        """
        Normalize a persisted selection.

        Args:
            article: Article key
            raw: Stored clause ids (may contain legacy ids and duplicates)

        Returns:
            Normalized selection; resolving it again returns it unchanged
        """
        catalog = self.library.catalog(article)
        ids = dedupe(self.legacy_resolve(article, raw))
        mode = article_config(article).mode

        if mode == SelectionMode.FREE:
            # unknown ids pass through; only the first primary survives, moved to the front
            primary_ids = catalog.primary_ids
            primary = next((clause_id for clause_id in ids if clause_id in primary_ids), None)
            rest = tuple(clause_id for clause_id in ids if clause_id not in primary_ids)
            return ((primary,) if primary else ()) + rest

        addon_ids = catalog.addon_ids
        addons = tuple(clause_id for clause_id in ids if clause_id in addon_ids)
        if mode == SelectionMode.ADDON_ONLY:
            return addons

        primary = self.choose_primary(catalog, ids)
        result = dedupe(((primary,) if primary else ()) + addons)
        logger.debug(f"Resolved {article.value} selection {list(raw)} -> {list(result)}")
        return result

    def ensure_default_primary_selection(
        self,
        article: ArticleKey,
        raw: Iterable[str],
        clause_id: Optional[str] = None,
    ) -> Tuple[str, ...]:
        """
        Proposed persisted list with the resolved primary made explicit.

        Returns the stored list unchanged when it already holds the primary
        (or the article has none); otherwise the primary followed by the
        stored addons.
        """
        raw = tuple(i for i in raw if i)
        catalog = self.library.catalog(article)
        current = self.legacy_resolve(article, raw)
        if clause_id is None:
            clause_id = self.choose_primary(catalog, current)
        if not clause_id or clause_id in current:
            return raw
        addons = dedupe(i for i in current if i in catalog.addon_ids)
        return (clause_id,) + addons

    # -------------------------------------------------------------------------
    # Render lists
    # -------------------------------------------------------------------------

    def clauses_for_article(self, article: ArticleKey, snapshot: IntakeSnapshot) -> List[Clause]:
        """Clauses an article renders, in rendering order."""
        handlers = {
            ArticleKey.TESTATOR: self._testator_clauses,
            ArticleKey.FAMILY: self._family_clauses,
            ArticleKey.EXECUTORS: self._executor_clauses,
            ArticleKey.POWERS: self._addon_only_clauses,
            ArticleKey.MISC: self._addon_only_clauses,
            ArticleKey.TRUSTS: self._trust_clauses,
            ArticleKey.SIGNATURE: self._signature_clauses,
        }
        handler = handlers.get(article, self._primary_clauses)
        clauses = handler(article, snapshot)
        logger.debug(f"{article.value}: rendering {[c.id for c in clauses]}")
        return clauses

    def _lookup(self, catalog: ArticleCatalog, ids: Iterable[str]) -> List[Clause]:
        found = (catalog.find(clause_id) for clause_id in ids)
        return [clause for clause in found if clause is not None]

    def _testator_clauses(self, article: ArticleKey, snapshot: IntakeSnapshot) -> List[Clause]:
        catalog = self.library.catalog(article)
        id_mode = snapshot.text("IdMode", "Simple").lower()
        title_id = TESTATOR_TITLE_SIMPLE if id_mode == "simple" else TESTATOR_TITLE_EXPANDED

        fixed = [title_id, TESTATOR_REVOCATION]
        if snapshot.text("IncludeCapacity") == "Yes":
            fixed.append(TESTATOR_CAPACITY)
        clauses = self._lookup(catalog, fixed)

        selected = set(self.resolve(article, snapshot.selection(article)))
        for clause in catalog.clauses:
            if clause.id not in selected:
                continue
            if clause.id.startswith(TESTATOR_TITLE_PREFIX):
                continue
            if clause.id in (TESTATOR_REVOCATION, TESTATOR_CAPACITY):
                continue
            clauses.append(clause)
        return clauses

    def _family_clauses(self, article: ArticleKey, snapshot: IntakeSnapshot) -> List[Clause]:
        selection = self.resolve(article, snapshot.selection(article))
        if not selection:
            selection = suggest_family_clauses(snapshot)
        return self._lookup(self.library.catalog(article), selection)

    def _primary_clauses(self, article: ArticleKey, snapshot: IntakeSnapshot) -> List[Clause]:
        catalog = self.library.catalog(article)
        selection = self.resolve(article, snapshot.selection(article))
        return list(catalog.boilerplate) + self._lookup(catalog, selection)

    def _trust_clauses(self, article: ArticleKey, snapshot: IntakeSnapshot) -> List[Clause]:
        catalog = self.library.catalog(article)
        selection = self.resolve(article, snapshot.selection(article))
        return self._lookup(catalog, selection) + list(catalog.boilerplate)

    def _addon_only_clauses(self, article: ArticleKey, snapshot: IntakeSnapshot) -> List[Clause]:
        catalog = self.library.catalog(article)
        selection = self.resolve(article, snapshot.selection(article))
        chosen = self._lookup(catalog, selection)
        if not chosen and not snapshot.has_selection(article):
            chosen = list(catalog.addons)
        return list(catalog.boilerplate) + chosen

    def _executor_clauses(self, article: ArticleKey, snapshot: IntakeSnapshot) -> List[Clause]:
        catalog = self.library.catalog(article)
        wanted = set(self.resolve(article, snapshot.selection(article)))
        wanted.update(executor_policy_ids(snapshot.fields))
        return [
            clause for clause in catalog.clauses
            if clause.id in wanted or clause.type_tag == "primary"
        ]

    def _signature_clauses(self, article: ArticleKey, snapshot: IntakeSnapshot) -> List[Clause]:
        catalog = self.library.catalog(article)
        selected = set(self.resolve(article, snapshot.selection(article)))
        return [
            clause for clause in catalog.clauses
            if clause.id in selected or clause.type_tag == "primary"
        ]

    def resolved_clause_ids(self, snapshot: IntakeSnapshot) -> Mapping[ArticleKey, Tuple[str, ...]]:
        """Rendered clause ids per article, for every article."""
        return {
            article: tuple(c.id for c in self.clauses_for_article(article, snapshot))
            for article in ArticleKey
        }
