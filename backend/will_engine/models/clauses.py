"""
Will Engine - Clause Models

A will is ASSEMBLED from prewritten clauses, never written. Each article owns
a catalog of clauses split into three closed categories:

- PRIMARY: mutually exclusive, at most one active per article
- ADDON: independently toggleable
- BOILERPLATE: always rendered, never stored in a selection
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


class ClauseCategory(str, Enum):
    PRIMARY = "primary_select_one"
    ADDON = "extras_multi"
    BOILERPLATE = "boilerplate_always"


class ArticleKey(str, Enum):
    """Document sections, in rendering order."""
    TESTATOR = "testator"
    FAMILY = "family"
    DEBTS = "debts"
    GIFTS = "gifts"
    RESIDUARY = "residuary"
    EXECUTORS = "executors"
    POWERS = "powers"
    MISC = "misc"
    TRUSTS = "trusts"
    SIGNATURE = "signature"


class SelectionMode(str, Enum):
    """How an article's persisted selection is normalized."""
    PRIMARY = "primary"          # one primary + addons
    ADDON_ONLY = "addon_only"    # addons only, unknown ids dropped
    FREE = "free"                # legacy-resolve + dedupe, unknown ids pass through


@dataclass(frozen=True)
class Clause:
    """A single templated paragraph of one article."""
    id: str
    category: ClauseCategory
    body: str = ""
    title: str = ""
    default: bool = False
    legacy_ids: Tuple[str, ...] = ()
    placeholders: Tuple[str, ...] = ()
    # Free-form source tag from flat catalogs ("primary", "addon", "always", ...)
    type_tag: str = ""

    @property
    def is_primary(self) -> bool:
        return self.category == ClauseCategory.PRIMARY


@dataclass(frozen=True)
class ArticleCatalog:
    """
    Frozen clause catalog for one article.

    Invariant: at most one clause in `primary` has default=True.
    `legacy_map` maps retired ids to current ids (first writer wins).
    """
    article: ArticleKey
    primary: Tuple[Clause, ...] = ()
    addons: Tuple[Clause, ...] = ()
    boilerplate: Tuple[Clause, ...] = ()
    legacy_map: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    default_primary_id: Optional[str] = None
    # Source order for flat catalogs; empty for grouped ones
    listing: Tuple[Clause, ...] = ()

    @property
    def clauses(self) -> Tuple[Clause, ...]:
        if self.listing:
            return self.listing
        return self.primary + self.addons + self.boilerplate

    @property
    def primary_ids(self) -> Tuple[str, ...]:
        return tuple(clause.id for clause in self.primary)

    @property
    def addon_ids(self) -> Tuple[str, ...]:
        return tuple(clause.id for clause in self.addons)

    @property
    def is_empty(self) -> bool:
        return not (self.primary or self.addons or self.boilerplate)

    def find(self, clause_id: str) -> Optional[Clause]:
        for clause in self.clauses:
            if clause.id == clause_id:
                return clause
        return None

    def resolve_legacy_id(self, clause_id: str) -> str:
        """Map a retired id forward; unknown ids pass through unchanged."""
        return self.legacy_map.get(clause_id, clause_id)

    def flagged_default(self) -> Optional[Clause]:
        for clause in self.primary:
            if clause.default:
                return clause
        return None

    def with_default_primary(self, clause_id: str) -> "ArticleCatalog":
        """Return a copy where `clause_id` is the only default primary."""
        if clause_id not in self.primary_ids:
            return self
        primary = tuple(
            replace(clause, default=(clause.id == clause_id)) for clause in self.primary
        )
        by_id = {clause.id: clause for clause in primary}
        listing = tuple(by_id.get(clause.id, clause) if clause.is_primary else clause
                        for clause in self.listing)
        return replace(self, primary=primary, default_primary_id=clause_id, listing=listing)


@dataclass(frozen=True)
class ClauseLibrary:
    """All article catalogs, frozen after load."""
    catalogs: Mapping[ArticleKey, ArticleCatalog] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def catalog(self, article: ArticleKey) -> ArticleCatalog:
        """Catalog for an article; a missing article is an empty catalog."""
        found = self.catalogs.get(article)
        if found is None:
            return ArticleCatalog(article=article)
        return found

    def find(self, clause_id: str) -> Optional[Clause]:
        for catalog in self.catalogs.values():
            clause = catalog.find(clause_id)
            if clause is not None:
                return clause
        return None

    def summary(self) -> Dict[str, Dict[str, Tuple[str, ...]]]:
        return {
            article.value: {
                "primary": catalog.primary_ids,
                "addons": catalog.addon_ids,
                "boilerplate": tuple(c.id for c in catalog.boilerplate),
            }
            for article, catalog in self.catalogs.items()
        }
