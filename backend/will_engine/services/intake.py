"""
Will Engine - Intake Snapshot

Immutable view over the intake store. The store itself (a flat key/value
mapping) belongs to the caller; every core function reads a snapshot and
returns proposed next-state values.

Reserved keys:
- NameBank: list of entity dicts
- SelectedClauses: {article: [clause ids]}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..models.entities import BaseRole, ClientNode, Entity, Organization, Person
from ..models.clauses import ArticleKey
from .name_bank import build_client_node, entity_from_dict, entity_to_dict


ENTITIES_KEY = "NameBank"
SELECTIONS_KEY = "SelectedClauses"

# UI sentinel for an empty dropdown; never a real value
SELECT_PLACEHOLDER = "— Select —"


def _freeze_selection(raw: Any) -> Tuple[str, ...]:
    """Persisted selections may be a bare id or a list; blanks are dropped."""
    if isinstance(raw, str):
        return (raw,) if raw else ()
    if isinstance(raw, (list, tuple)):
        return tuple(str(item) for item in raw if item)
    return ()


def _article_value(article: Union[ArticleKey, str]) -> str:
    return article.value if isinstance(article, ArticleKey) else str(article)


@dataclass(frozen=True)
class IntakeSnapshot:
    """
    Read-only intake state with an id -> entity arena.

    `selections` only holds articles that have ever been stored; an article
    stored as an empty list is still "present".
    """
    fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    entities: Tuple[Entity, ...] = ()
    selections: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_dict(
        cls,
        data: Optional[Mapping[str, Any]] = None,
        selections: Optional[Mapping[str, Any]] = None,
    ) -> "IntakeSnapshot":
        """
        Build a snapshot from the raw store.

        Args:
            data: Flat intake mapping (entities under NameBank)
            selections: Per-article selections; defaults to data["SelectedClauses"]
        """
        data = dict(data or {})
        raw_entities = data.pop(ENTITIES_KEY, None) or []
        raw_selections = data.pop(SELECTIONS_KEY, None)
        if selections is None:
            selections = raw_selections if isinstance(raw_selections, Mapping) else {}

        entities = tuple(
            entity_from_dict(raw) for raw in raw_entities if isinstance(raw, Mapping)
        )
        frozen = {str(key): _freeze_selection(value) for key, value in selections.items()}
        return cls(
            fields=MappingProxyType(data),
            entities=entities,
            selections=MappingProxyType(frozen),
        )

    # -------------------------------------------------------------------------
    # Field access
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        value = self.fields.get(key)
        return default if value is None else value

    def text(self, key: str, default: str = "") -> str:
        """Stripped string value; the empty-dropdown marker counts as empty."""
        value = self.fields.get(key)
        if value is None:
            return default
        text = str(value).strip()
        if not text or text == SELECT_PLACEHOLDER:
            return default
        return text

    def list_of(self, key: str) -> List[Any]:
        value = self.fields.get(key)
        return list(value) if isinstance(value, (list, tuple)) else []

    @property
    def relationship(self) -> str:
        return self.text("RelationshipStatus").lower()

    @property
    def client(self) -> ClientNode:
        return build_client_node(self.fields)

    # -------------------------------------------------------------------------
    # Entity arena
    # -------------------------------------------------------------------------

    @property
    def by_id(self) -> Mapping[str, Entity]:
        return MappingProxyType({entity.id: entity for entity in self.entities})

    def entity(self, entity_id: Any) -> Optional[Entity]:
        if not isinstance(entity_id, str) or not entity_id:
            return None
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None

    def people(self) -> List[Person]:
        return [e for e in self.entities if isinstance(e, Person)]

    def organizations(self) -> List[Organization]:
        return [e for e in self.entities if isinstance(e, Organization)]

    def people_with_role(self, role: Union[BaseRole, str]) -> List[Person]:
        """People holding the role as primary or badge, in collection order."""
        return [p for p in self.people() if p.has_role(role)]

    def children(self) -> List[Person]:
        return [p for p in self.people() if p.is_child]

    # -------------------------------------------------------------------------
    # Selections
    # -------------------------------------------------------------------------

    def has_selection(self, article: Union[ArticleKey, str]) -> bool:
        return _article_value(article) in self.selections

    def selection(self, article: Union[ArticleKey, str]) -> Tuple[str, ...]:
        return self.selections.get(_article_value(article), ())

    # -------------------------------------------------------------------------
    # Derived snapshots
    # -------------------------------------------------------------------------

    def with_fields(self, **updates: Any) -> "IntakeSnapshot":
        merged = dict(self.fields)
        merged.update(updates)
        return IntakeSnapshot(
            fields=MappingProxyType(merged),
            entities=self.entities,
            selections=self.selections,
        )

    def with_entities(self, entities: Iterable[Entity]) -> "IntakeSnapshot":
        return IntakeSnapshot(
            fields=self.fields,
            entities=tuple(entities),
            selections=self.selections,
        )

    def with_selection(self, article: Union[ArticleKey, str], ids: Iterable[str]) -> "IntakeSnapshot":
        merged = dict(self.selections)
        merged[_article_value(article)] = tuple(ids)
        return IntakeSnapshot(
            fields=self.fields,
            entities=self.entities,
            selections=MappingProxyType(merged),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.fields)
        data[ENTITIES_KEY] = [entity_to_dict(entity) for entity in self.entities]
        data[SELECTIONS_KEY] = {key: list(ids) for key, ids in self.selections.items()}
        return data
