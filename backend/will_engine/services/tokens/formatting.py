"""
Will Engine - Token Formatting

Grammatical list and percentage formatting shared by the token engine.
"""

from __future__ import annotations
from typing import Any, Iterable, List, Optional


SELECT_CHARITY_MARKER = "[SELECT CHARITY]"

# Display fractions for evenly split charity lists of 1-5 entries
FIXED_CHARITY_SHARES = {
    1: "(100%)",
    2: "(50%)",
    3: "(1/3)",
    4: "(25%)",
    5: "(20%)",
}


def clean_names(names: Iterable[Optional[str]]) -> List[str]:
    return [name.strip() for name in names if name and name.strip()]


def inline(names: Iterable[Optional[str]]) -> str:
    """Comma-joined names."""
    return ", ".join(clean_names(names))


def inline_with_and(names: Iterable[Optional[str]]) -> str:
    """
    Oxford-style list.

    "A" / "A and B" / "A, B, and C"; empty string for no names.
    """
    cleaned = clean_names(names)
    if not cleaned:
        return ""
    if len(cleaned) == 1:
        return cleaned[0]
    if len(cleaned) == 2:
        return f"{cleaned[0]} and {cleaned[1]}"
    return f"{', '.join(cleaned[:-1])}, and {cleaned[-1]}"


def bullet(names: Iterable[Optional[str]]) -> str:
    """One "- Name" line per entry, starting on a new line; empty for no names."""
    cleaned = clean_names(names)
    if not cleaned:
        return ""
    return "\n" + "\n".join(f"- {name}" for name in cleaned)


def parse_percent(value: Any) -> float:
    """Lenient float parse; anything unparseable is 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().rstrip("%"))
    except (TypeError, ValueError):
        return 0.0


def format_fixed(value: float) -> str:
    """Two-decimal string, the stored form of a percentage."""
    return f"{value:.2f}"


def format_charity_percentage(percentage: Any, total_entries: int) -> str:
    """
    Display suffix for one backup charity share.

    1-5 entries use fixed fractions regardless of the stored value; 6 or
    more show the stored value rounded to two decimals.
    """
    fixed = FIXED_CHARITY_SHARES.get(total_entries)
    if fixed is not None:
        return fixed
    return f"({format_fixed(parse_percent(percentage))}%)"


def with_dollar_sign(value: Any) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        return ""
    return text if text.startswith("$") else f"${text}"
