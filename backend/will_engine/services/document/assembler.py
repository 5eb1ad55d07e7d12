"""
Will Assembler

Assembles the will from resolved clauses, article by article.

Assembly order:
1. Testator declaration (unheaded)
2. Family statement (unheaded)
3. Articles I-VIII, each under its heading
   (debts, gifts, residuary, executors, powers, misc, trusts, signature)

Articles that resolve to no clauses are omitted. The assembler ONLY
assembles: selection, token derivation and hydration live in their own
services.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional

from ...models.clauses import ArticleKey, Clause, ClauseLibrary
from ...models.document import ArticleSection, DOCUMENT_TITLE_TEMPLATE, WillDocument
from ..clauses.hydrator import hydrate_body, hydrate_clauses
from ..clauses.library import ARTICLE_CONFIGS
from ..clauses.resolver import SelectionResolver
from ..intake import IntakeSnapshot
from ..tokens.derivation import derive_tokens
from .gifts import render_specific_gifts

logger = logging.getLogger(__name__)


def _raw_text(clauses: List[Clause]) -> str:
    bodies = (clause.body.strip() for clause in clauses)
    return "\n\n".join(body for body in bodies if body)


class WillAssembler:
    """
    Assembles WillDocuments from a snapshot.

    Same snapshot + same library → same document → same content hash.
    """

    def __init__(self, library: ClauseLibrary, resolver: Optional[SelectionResolver] = None):
        self.library = library
        self.resolver = resolver or SelectionResolver(library)

    def assemble(
        self,
        snapshot: IntakeSnapshot,
        hydrate: bool = True,
        tokens: Optional[Mapping[str, Any]] = None,
    ) -> WillDocument:
        """
        Assemble the will.

        Args:
            snapshot: Intake snapshot
            hydrate: False keeps every [[Token]] placeholder (clauses-only rendition)
            tokens: Precomputed token map (derived from the snapshot when omitted)

        Returns:
            WillDocument with one section per non-empty article
        """
        if hydrate and tokens is None:
            tokens = derive_tokens(snapshot)

        sections = []
        for config in ARTICLE_CONFIGS:
            clauses = self.resolver.clauses_for_article(config.article, snapshot)
            if hydrate:
                text = hydrate_clauses(clauses, tokens)
            else:
                text = _raw_text(clauses)

            if hydrate and config.article == ArticleKey.GIFTS:
                gifts_text = "\n\n".join(render_specific_gifts(snapshot))
                text = "\n\n".join(part for part in (text, gifts_text) if part)

            if not clauses and not text:
                continue
            sections.append(ArticleSection(
                article=config.article,
                heading=config.heading,
                clause_ids=tuple(clause.id for clause in clauses),
                text=text,
            ))

        title = hydrate_body(DOCUMENT_TITLE_TEMPLATE, tokens) if hydrate else DOCUMENT_TITLE_TEMPLATE
        document = WillDocument(title=title, sections=sections, hydrated=hydrate)
        logger.info(
            f"Assembled will: {len(sections)} sections, {len(document.clause_ids())} clauses, "
            f"hydrated={hydrate}, hash={document.content_hash()}"
        )
        return document

    def resolved_clauses(self, snapshot: IntakeSnapshot) -> Dict[str, List[str]]:
        return {
            article.value: list(ids)
            for article, ids in self.resolver.resolved_clause_ids(snapshot).items()
        }


def build_document(snapshot: IntakeSnapshot, library: ClauseLibrary) -> WillDocument:
    """Hydrated will for a snapshot."""
    return WillAssembler(library).assemble(snapshot, hydrate=True)


def build_clauses_only_document(snapshot: IntakeSnapshot, library: ClauseLibrary) -> WillDocument:
    """Unhydrated will: resolved clause bodies with placeholders preserved."""
    return WillAssembler(library).assemble(snapshot, hydrate=False)
