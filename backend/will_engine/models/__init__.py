"""Will Engine - Data Models"""
from .entities import (
    # Enums and sentinels
    BaseRole, EntityKind, ChildRelationship, Sentinel, CLIENT, NO_PARTNER,
    # Records
    Address, Person, Organization, ClientNode, Entity, ParentRef, new_entity_id,
)
from .family import (
    FamilyContext, PartnerDescriptor, ChildDescriptor, PartnerStack, FamilyGraph,
    FamilySelectionUpdate,
)
from .clauses import (
    ClauseCategory, ArticleKey, SelectionMode, Clause, ArticleCatalog, ClauseLibrary,
)
from .document import ArticleSection, WillDocument, DOCUMENT_TITLE_TEMPLATE

__all__ = [
    "BaseRole", "EntityKind", "ChildRelationship", "Sentinel", "CLIENT", "NO_PARTNER",
    "Address", "Person", "Organization", "ClientNode", "Entity", "ParentRef", "new_entity_id",
    "FamilyContext", "PartnerDescriptor", "ChildDescriptor", "PartnerStack", "FamilyGraph",
    "FamilySelectionUpdate",
    "ClauseCategory", "ArticleKey", "SelectionMode", "Clause", "ArticleCatalog", "ClauseLibrary",
    "ArticleSection", "WillDocument", "DOCUMENT_TITLE_TEMPLATE",
]
