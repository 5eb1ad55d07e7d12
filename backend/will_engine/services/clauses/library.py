"""
Will Engine - Clause Library

Builds frozen per-article catalogs from raw catalog documents.

Catalog layouts:
- GROUPED: {primary_select_one, extras_multi, boilerplate_always, default_primary?}
- EXTRAS_ONLY: grouped, but primaries are ignored (addon-only articles)
- FLAT: {clauses: [...]} with a per-clause `type` tag

Malformed documents or groups degrade to empty; individual clause records
without an id are skipped. Neither aborts the other articles.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ...models.clauses import (
    ArticleCatalog,
    ArticleKey,
    Clause,
    ClauseCategory,
    ClauseLibrary,
    SelectionMode,
)

logger = logging.getLogger(__name__)


class CatalogLayout(str, Enum):
    GROUPED = "grouped"
    EXTRAS_ONLY = "extras_only"
    FLAT = "flat"


@dataclass(frozen=True)
class ArticleConfig:
    """Static per-article configuration."""
    article: ArticleKey
    library: str                  # catalog file stem: clauses-<library>.json
    layout: CatalogLayout
    mode: SelectionMode
    heading: Optional[str] = None


# Rendering order
ARTICLE_CONFIGS: Tuple[ArticleConfig, ...] = (
    ArticleConfig(ArticleKey.TESTATOR, "testator", CatalogLayout.FLAT, SelectionMode.FREE),
    ArticleConfig(ArticleKey.FAMILY, "family", CatalogLayout.FLAT, SelectionMode.FREE),
    ArticleConfig(ArticleKey.DEBTS, "debts_taxes", CatalogLayout.GROUPED, SelectionMode.PRIMARY,
                "ARTICLE I — PAYMENT OF DEBTS, EXPENSES, AND TAXES"),
    ArticleConfig(ArticleKey.GIFTS, "gifts", CatalogLayout.GROUPED, SelectionMode.PRIMARY,
                "ARTICLE II — TANGIBLE PERSONAL PROPERTY"),
    ArticleConfig(ArticleKey.RESIDUARY, "residuary", CatalogLayout.GROUPED, SelectionMode.PRIMARY,
                "ARTICLE III — RESIDUARY ESTATE"),
    ArticleConfig(ArticleKey.EXECUTORS, "executors", CatalogLayout.FLAT, SelectionMode.FREE,
                "ARTICLE IV — EXECUTORS"),
    ArticleConfig(ArticleKey.POWERS, "powers", CatalogLayout.EXTRAS_ONLY, SelectionMode.ADDON_ONLY,
                "ARTICLE V — FIDUCIARY POWERS"),
    ArticleConfig(ArticleKey.MISC, "misc", CatalogLayout.EXTRAS_ONLY, SelectionMode.ADDON_ONLY,
                "ARTICLE VI — MISCELLANEOUS PROVISIONS"),
    ArticleConfig(ArticleKey.TRUSTS, "trusts", CatalogLayout.GROUPED, SelectionMode.PRIMARY,
                "ARTICLE VII — TRUST PROVISIONS"),
    ArticleConfig(ArticleKey.SIGNATURE, "signature", CatalogLayout.FLAT, SelectionMode.FREE,
                "ARTICLE VIII — EXECUTION"),
)

ARTICLE_CONFIG_BY_KEY: Mapping[ArticleKey, ArticleConfig] = MappingProxyType(
    {config.article: config for config in ARTICLE_CONFIGS}
)

# Flat-catalog `type` tags per category
TYPE_TAGS = {
    ClauseCategory.PRIMARY: "primary",
    ClauseCategory.ADDON: "addon",
    ClauseCategory.BOILERPLATE: "always",
}


def article_config(article: ArticleKey) -> ArticleConfig:
    return ARTICLE_CONFIG_BY_KEY[article]


def catalog_filename(config: ArticleConfig) -> str:
    return f"clauses-{config.library}.json"


# =============================================================================
# CLAUSE RECORDS
# =============================================================================

def _string_tuple(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(item) for item in value if item)


def clause_from_dict(raw: Any, category: ClauseCategory) -> Optional[Clause]:
    """One clause record; None (logged) when it has no usable id."""
    if not isinstance(raw, Mapping):
        logger.warning(f"Skipping non-object clause record: {raw!r}")
        return None
    clause_id = raw.get("id")
    if not isinstance(clause_id, str) or not clause_id.strip():
        logger.warning(f"Skipping clause record without id (title={raw.get('title')!r})")
        return None

    legacy = raw.get("legacyIds")
    if legacy is None:
        legacy = raw.get("legacy_ids")

    body = raw.get("body")
    return Clause(
        id=clause_id.strip(),
        category=category,
        body=body if isinstance(body, str) else "",
        title=str(raw.get("title") or ""),
        default=raw.get("default") is True,
        legacy_ids=_string_tuple(legacy),
        placeholders=_string_tuple(raw.get("placeholders")),
        type_tag=str(raw.get("type") or TYPE_TAGS[category]),
    )


def flat_category(raw: Mapping[str, Any]) -> ClauseCategory:
    """Category of a flat-catalog record from its `category` or `type` tag."""
    category = raw.get("category")
    type_tag = raw.get("type")
    if category == ClauseCategory.PRIMARY.value or type_tag == "primary":
        return ClauseCategory.PRIMARY
    if category == ClauseCategory.BOILERPLATE.value or type_tag == "always":
        return ClauseCategory.BOILERPLATE
    return ClauseCategory.ADDON


def _group(article: ArticleKey, data: Mapping[str, Any], key: str) -> List[Any]:
    group = data.get(key)
    if group is None:
        return []
    if not isinstance(group, list):
        logger.warning(f"Catalog '{article.value}': group '{key}' is not a list; treating as empty")
        return []
    return group


def _clauses(records: Iterable[Any], category: ClauseCategory) -> Tuple[Clause, ...]:
    built = (clause_from_dict(raw, category) for raw in records)
    return tuple(clause for clause in built if clause is not None)


def build_legacy_map(clauses: Iterable[Clause]) -> Mapping[str, str]:
    """Retired id -> current id. The first clause claiming an id keeps it."""
    legacy: Dict[str, str] = {}
    for clause in clauses:
        for legacy_id in clause.legacy_ids:
            if legacy_id not in legacy:
                legacy[legacy_id] = clause.id
    return MappingProxyType(legacy)


# =============================================================================
# CATALOG BUILDING
# =============================================================================

def set_default_primary(catalog: ArticleCatalog, clause_id: Optional[str]) -> ArticleCatalog:
    """Make `clause_id` the only default primary; unknown ids leave the catalog as is."""
    if not clause_id:
        return catalog
    return catalog.with_default_primary(clause_id)


def _pick_default_primary(catalog: ArticleCatalog, configured: Any) -> Optional[str]:
    if isinstance(configured, str) and configured in catalog.primary_ids:
        return configured
    flagged = catalog.flagged_default()
    if flagged is not None:
        return flagged.id
    if catalog.primary:
        return catalog.primary[0].id
    return None


def _build_flat(article: ArticleKey, records: List[Any], drop_primary: bool) -> ArticleCatalog:
    listing: List[Clause] = []
    for raw in records:
        category = flat_category(raw) if isinstance(raw, Mapping) else ClauseCategory.ADDON
        if drop_primary and category == ClauseCategory.PRIMARY:
            continue
        clause = clause_from_dict(raw, category)
        if clause is not None:
            listing.append(clause)

    return ArticleCatalog(
        article=article,
        primary=tuple(c for c in listing if c.category == ClauseCategory.PRIMARY),
        addons=tuple(c for c in listing if c.category == ClauseCategory.ADDON),
        boilerplate=tuple(c for c in listing if c.category == ClauseCategory.BOILERPLATE),
        legacy_map=build_legacy_map(listing),
        listing=tuple(listing),
    )


def build_catalog(article: ArticleKey, data: Any, layout: Optional[CatalogLayout] = None) -> ArticleCatalog:
    """
    Build one article's catalog from its raw document.

    Args:
        article: Article the catalog belongs to
        data: Parsed catalog document (mapping or bare clause list)
        layout: Document layout (defaults to the article's configured layout)

    Returns:
        Frozen ArticleCatalog; empty when `data` is unusable
    """
    layout = layout or article_config(article).layout
    drop_primary = layout == CatalogLayout.EXTRAS_ONLY

    if isinstance(data, list):
        catalog = _build_flat(article, data, drop_primary)
    elif not isinstance(data, Mapping):
        if data is not None:
            logger.warning(f"Catalog '{article.value}' is not an object; using empty catalog")
        return ArticleCatalog(article=article)
    elif layout == CatalogLayout.FLAT or (
        "clauses" in data and "primary_select_one" not in data and "extras_multi" not in data
    ):
        catalog = _build_flat(article, _group(article, data, "clauses"), drop_primary)
    else:
        primary = () if drop_primary else _clauses(
            _group(article, data, ClauseCategory.PRIMARY.value), ClauseCategory.PRIMARY
        )
        addons = _clauses(_group(article, data, ClauseCategory.ADDON.value), ClauseCategory.ADDON)
        boilerplate = _clauses(
            _group(article, data, ClauseCategory.BOILERPLATE.value), ClauseCategory.BOILERPLATE
        )
        catalog = ArticleCatalog(
            article=article,
            primary=primary,
            addons=addons,
            boilerplate=boilerplate,
            legacy_map=build_legacy_map(primary + addons + boilerplate),
        )

    if layout == CatalogLayout.GROUPED:
        configured = data.get("default_primary") if isinstance(data, Mapping) else None
        catalog = set_default_primary(catalog, _pick_default_primary(catalog, configured))

    logger.debug(
        f"Catalog '{article.value}': {len(catalog.primary)} primary, "
        f"{len(catalog.addons)} addons, {len(catalog.boilerplate)} boilerplate"
    )
    return catalog


def build_library(documents: Mapping[str, Any]) -> ClauseLibrary:
    """
    Build the full library from raw documents keyed by library name.

    Missing libraries become empty catalogs.
    """
    catalogs = {
        config.article: build_catalog(config.article, documents.get(config.library), config.layout)
        for config in ARTICLE_CONFIGS
    }
    library = ClauseLibrary(catalogs=MappingProxyType(catalogs))
    total = sum(len(c.clauses) for c in catalogs.values())
    logger.info(f"Clause library built: {len(catalogs)} articles, {total} clauses")
    return library
