"""
Clauses - catalog building, selection resolution and hydration

Core principle: a will is ASSEMBLED from prewritten clauses, never written.
"""

from .library import (
    ARTICLE_CONFIGS,
    ArticleConfig,
    CatalogLayout,
    article_config,
    build_catalog,
    build_library,
    catalog_filename,
    clause_from_dict,
    set_default_primary,
)
from .resolver import (
    BOND_POLICY_CLAUSES,
    COMPENSATION_POLICY_CLAUSES,
    VOTING_POLICY_CLAUSES,
    SelectionResolver,
    executor_policy_ids,
)
from .hydrator import (
    SUPPRESSED,
    find_placeholders,
    hydrate_body,
    hydrate_clause,
    hydrate_clauses,
    placeholder,
)

__all__ = [
    "ARTICLE_CONFIGS",
    "ArticleConfig",
    "CatalogLayout",
    "article_config",
    "build_catalog",
    "build_library",
    "catalog_filename",
    "clause_from_dict",
    "set_default_primary",
    "BOND_POLICY_CLAUSES",
    "COMPENSATION_POLICY_CLAUSES",
    "VOTING_POLICY_CLAUSES",
    "SelectionResolver",
    "executor_policy_ids",
    "SUPPRESSED",
    "find_placeholders",
    "hydrate_body",
    "hydrate_clause",
    "hydrate_clauses",
    "placeholder",
]
