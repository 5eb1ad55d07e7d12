"""
Will Engine - Document Models

The assembled will: ordered article sections, each carrying the resolved
clause ids and its rendered text. Same intake + same catalogs produce the
same content hash.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from hashlib import sha256
from typing import Any, Dict, List, Optional, Tuple
import json

from .clauses import ArticleKey


DOCUMENT_TITLE_TEMPLATE = "LAST WILL AND TESTAMENT OF [[ClientFullName]]"


@dataclass(frozen=True)
class ArticleSection:
    """One rendered article. `heading` is None for unheaded sections."""
    article: ArticleKey
    heading: Optional[str]
    clause_ids: Tuple[str, ...]
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "article": self.article.value,
            "heading": self.heading,
            "clause_ids": list(self.clause_ids),
            "text": self.text,
        }


@dataclass
class WillDocument:
    """
    Complete will assembled from article sections.

    `hydrated` is False for the clauses-only rendition where every
    [[Token]] placeholder is preserved.
    """
    title: str
    sections: List[ArticleSection] = field(default_factory=list)
    hydrated: bool = True

    def section(self, article: ArticleKey) -> Optional[ArticleSection]:
        for section in self.sections:
            if section.article == article:
                return section
        return None

    def clause_ids(self) -> List[str]:
        ids: List[str] = []
        for section in self.sections:
            ids.extend(section.clause_ids)
        return ids

    def to_text(self) -> str:
        lines = [self.title, ""]
        for section in self.sections:
            if section.heading:
                lines.extend([section.heading, ""])
            if section.text:
                lines.extend([section.text, ""])
        return "\n".join(lines).strip() + "\n"

    def content_hash(self) -> str:
        content = {
            "title": self.title,
            "hydrated": self.hydrated,
            "sections": [s.to_dict() for s in self.sections],
        }
        return sha256(json.dumps(content, sort_keys=True).encode()).hexdigest()[:16]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "hydrated": self.hydrated,
            "sections": [s.to_dict() for s in self.sections],
            "text": self.to_text(),
            "content_hash": self.content_hash(),
        }
