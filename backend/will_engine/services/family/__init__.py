"""
Family - classification, suggestion and graph building

Three pure projections of the intake snapshot:
- build_family_context: flags and counts for the suggestion table
- FamilySuggestionEngine: family clause ids + auto-managed selection rule
- FamilyGraphBuilder: partner stacks and unpaired children
"""

from .context import (
    build_family_context,
    client_children,
    current_spouse_children,
    first_spouse_id,
    prior_children,
)
from .suggestions import (
    DEFAULT_FAMILY_CLAUSE_ID,
    FamilySuggestionEngine,
    family_clause_id,
    get_engine,
    is_selection_auto_managed,
    suggest_family_clauses,
)
from .graph import (
    FamilyGraphBuilder,
    bucket_key,
    build_family_graph,
    describe_child,
    get_builder,
)

__all__ = [
    "build_family_context",
    "client_children",
    "current_spouse_children",
    "first_spouse_id",
    "prior_children",
    "DEFAULT_FAMILY_CLAUSE_ID",
    "FamilySuggestionEngine",
    "family_clause_id",
    "get_engine",
    "is_selection_auto_managed",
    "suggest_family_clauses",
    "FamilyGraphBuilder",
    "bucket_key",
    "build_family_graph",
    "describe_child",
    "get_builder",
]
