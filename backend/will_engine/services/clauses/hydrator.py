"""
Template Hydrator

Replaces [[TokenName]] placeholders in clause bodies. A token without a
value (missing, None or "") keeps its literal placeholder so gaps stay
visible in review.
"""

from __future__ import annotations
import re
from typing import Any, Iterable, Mapping

from ...models.clauses import Clause

PLACEHOLDER_PATTERN = re.compile(r"\[\[([A-Za-z0-9_]+)\]\]")

# Zero-width space: a token deliberately rendered as nothing
SUPPRESSED = "\u200b"


def placeholder(name: str) -> str:
    return f"[[{name}]]"


def find_placeholders(body: str) -> list:
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(body or "")))


def hydrate_body(body: str, tokens: Mapping[str, Any]) -> str:
    def substitute(match: "re.Match[str]") -> str:
        value = tokens.get(match.group(1))
        if value is None or value == "":
            return match.group(0)
        return str(value)

    return PLACEHOLDER_PATTERN.sub(substitute, body or "")


def hydrate_clause(clause: Clause, tokens: Mapping[str, Any]) -> str:
    """Hydrated clause text with suppressed tokens removed."""
    return hydrate_body(clause.body, tokens).replace(SUPPRESSED, "").strip()


def hydrate_clauses(clauses: Iterable[Clause], tokens: Mapping[str, Any]) -> str:
    """Hydrated bodies of several clauses, blank-line separated."""
    bodies = (hydrate_clause(clause, tokens) for clause in clauses)
    return "\n\n".join(body for body in bodies if body)
