"""
Family Suggestion Engine

Proposes the clause-id set for the family article from the Family Context.

Decision rules (first on relationship status):
- widowed  → widowed_children / widowed_no_children
- divorced → divorced_children_named / _general / divorced_no_children
- married  → stepchildren-only, no children, remarried (both / prior),
             all-ART, or generic married_children
- other    → unmarried_children / unmarried_no_children, plus adopted-single
             and partner-with-children additions

Layered additions apply regardless of the branch. An empty result falls
back to the default placeholder clause. Output is an ordered set: the order
of first addition.

Auto-managed rule: a stored selection may be silently replaced only while it
is empty, the lone placeholder, or exactly the previous suggestion set.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence, Tuple

from ...models.family import FamilyContext, FamilySelectionUpdate
from ..intake import IntakeSnapshot
from .context import build_family_context


FAMILY_CLAUSE_PREFIX = "family.statement."
DEFAULT_FAMILY_CLAUSE_ID = "family.statement.default_placeholder"


def family_clause_id(name: str) -> str:
    return f"{FAMILY_CLAUSE_PREFIX}{name}"


class _OrderedIdSet:
    """Insertion-ordered, duplicate-insensitive id accumulator."""

    def __init__(self):
        self._ids: List[str] = []

    def add(self, name: str) -> None:
        clause_id = family_clause_id(name)
        if clause_id not in self._ids:
            self._ids.append(clause_id)

    def __len__(self) -> int:
        return len(self._ids)

    def to_tuple(self) -> Tuple[str, ...]:
        return tuple(self._ids)


class FamilySuggestionEngine:
    """
    Maps a FamilyContext to family clause ids.

    Rules are deterministic: same context → same ids in the same order.
    """

    def suggest(self, context: FamilyContext) -> Tuple[str, ...]:
        """
        Suggest family clauses for a context.

        Args:
            context: FamilyContext from the classifier

        Returns:
            Ordered, de-duplicated clause ids; never empty
        """
        ids = _OrderedIdSet()
        relationship = context.relationship

        if relationship == "widowed":
            self._widowed(context, ids)
        elif relationship == "divorced":
            self._divorced(context, ids)
        elif relationship == "married":
            self._married(context, ids)
        else:
            self._unmarried(context, ids)

        self._layered_additions(context, ids)

        if not len(ids):
            return (DEFAULT_FAMILY_CLAUSE_ID,)
        return ids.to_tuple()

    # -------------------------------------------------------------------------
    # Branches
    # -------------------------------------------------------------------------

    def _widowed(self, ctx: FamilyContext, ids: _OrderedIdSet) -> None:
        if ctx.has_client_children:
            ids.add("widowed_children")
        else:
            ids.add("widowed_no_children")

    def _divorced(self, ctx: FamilyContext, ids: _OrderedIdSet) -> None:
        if not ctx.has_client_children:
            ids.add("divorced_no_children")
        elif ctx.has_former_spouse:
            ids.add("divorced_children_named")
        else:
            ids.add("divorced_children_general")

    def _married(self, ctx: FamilyContext, ids: _OrderedIdSet) -> None:
        if not ctx.has_client_children and ctx.has_step_children:
            ids.add("married_stepchildren_only")
            ids.add("remarried_with_stepchildren")
        elif not ctx.has_client_children:
            ids.add("married_no_children")
        elif ctx.has_prior_children and ctx.has_current_spouse_children:
            ids.add("remarried_both" if ctx.has_former_spouse else "remarried_both_general")
        elif ctx.has_prior_children:
            ids.add(
                "remarried_prior_children" if ctx.has_former_spouse
                else "remarried_prior_children_general"
            )
        elif 0 < ctx.art_children_count == ctx.client_children_count:
            ids.add("married_art_children")
        else:
            ids.add("married_children")

    def _unmarried(self, ctx: FamilyContext, ids: _OrderedIdSet) -> None:
        if ctx.has_client_children:
            ids.add("unmarried_children")
        elif not ctx.has_step_children:
            ids.add("unmarried_no_children")
        if ctx.has_adopted_children and not ctx.has_spouse and not ctx.has_partner:
            ids.add("single_with_adopted_children")
        if ctx.has_partner and ctx.has_client_children:
            ids.add("unmarried_with_partner_children")

    def _layered_additions(self, ctx: FamilyContext, ids: _OrderedIdSet) -> None:
        married = ctx.is_married
        if married and ctx.has_step_children:
            ids.add("remarried_with_stepchildren")
        if ctx.has_partner and not married:
            ids.add("partner_cohabitation_disclaimer")
            ids.add("de_facto_relationship")
        if ctx.has_former_spouse:
            ids.add("former_spouse_disclaimer")
        if ctx.has_prior_children:
            ids.add("children_from_prior_relationships")
        if not married and ctx.has_client_children and ctx.has_guardian:
            ids.add("unmarried_with_named_guardian")
        if married and ctx.has_prior_children and ctx.has_adopted_children:
            ids.add("remarried_prior_children_adopted")

    # -------------------------------------------------------------------------
    # Auto-managed selection
    # -------------------------------------------------------------------------

    def is_selection_auto_managed(
        self,
        selection: Sequence[str],
        prior_suggestion: Iterable[str],
    ) -> bool:
        """
        True while the stored selection is still engine-owned.

        Exact set equality with the previous suggestion is the only signal;
        a manual choice of the same set is indistinguishable from it.
        """
        if not selection:
            return True
        if list(selection) == [DEFAULT_FAMILY_CLAUSE_ID]:
            return True
        return set(selection) == set(prior_suggestion)

    def next_family_selection(
        self,
        prior: IntakeSnapshot,
        updated: IntakeSnapshot,
        selection: Optional[Sequence[str]] = None,
    ) -> FamilySelectionUpdate:
        """
        Propose the family selection after an intake edit.

        Args:
            prior: Snapshot before the edit
            updated: Snapshot after the edit
            selection: Stored family selection (defaults to prior's)

        Returns:
            FamilySelectionUpdate; `applied` is False when the stored value stands
        """
        current = tuple(selection if selection is not None else prior.selection("family"))
        prior_suggestion = self.suggest(build_family_context(prior))

        if not self.is_selection_auto_managed(current, prior_suggestion):
            return FamilySelectionUpdate(selection=current, applied=False)

        fresh = self.suggest(build_family_context(updated))
        if fresh == current:
            return FamilySelectionUpdate(selection=current, applied=False)
        return FamilySelectionUpdate(selection=fresh, applied=True)


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

_engine: Optional[FamilySuggestionEngine] = None


def get_engine() -> FamilySuggestionEngine:
    """Get or create the default suggestion engine singleton."""
    global _engine
    if _engine is None:
        _engine = FamilySuggestionEngine()
    return _engine


def suggest_family_clauses(snapshot: IntakeSnapshot) -> Tuple[str, ...]:
    """
    Convenience function: classify the snapshot and suggest clauses.

    Args:
        snapshot: Current intake snapshot

    Returns:
        Ordered family clause ids
    """
    return get_engine().suggest(build_family_context(snapshot))


def is_selection_auto_managed(selection: Sequence[str], prior_suggestion: Iterable[str]) -> bool:
    return get_engine().is_selection_auto_managed(selection, prior_suggestion)
