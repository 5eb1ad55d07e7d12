"""
Tokens - placeholder values for clause hydration

- formatting: inline / Oxford / bullet lists, charity percentage suffixes
- charities: backup charity share redistribution and status
- derivation: TokenDeriver, the full token map for a snapshot
"""

from .formatting import (
    FIXED_CHARITY_SHARES,
    SELECT_CHARITY_MARKER,
    bullet,
    format_charity_percentage,
    inline,
    inline_with_and,
    parse_percent,
    with_dollar_sign,
)
from .charities import (
    BackupCharitySummary,
    ShareStatus,
    redistribute_evenly,
    redistribute_proportionally,
    summarize_backup_charities,
)
from .derivation import DEFAULT_TOKENS, TokenDeriver, derive_tokens

__all__ = [
    "FIXED_CHARITY_SHARES",
    "SELECT_CHARITY_MARKER",
    "bullet",
    "format_charity_percentage",
    "inline",
    "inline_with_and",
    "parse_percent",
    "with_dollar_sign",
    "BackupCharitySummary",
    "ShareStatus",
    "redistribute_evenly",
    "redistribute_proportionally",
    "summarize_backup_charities",
    "DEFAULT_TOKENS",
    "TokenDeriver",
    "derive_tokens",
]
