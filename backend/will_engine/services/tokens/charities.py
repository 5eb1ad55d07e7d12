"""
Backup Charity Shares

Percentage split helpers for the backup-charity list. Entries are stored
as dicts ({"charityId": ..., "percentage": "33.33"}) with two-decimal
string percentages. Every helper returns new entry dicts.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import math
from typing import Any, Dict, List, Mapping, Sequence

from .formatting import format_fixed, parse_percent


class ShareStatus(str, Enum):
    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class BackupCharitySummary:
    total: float
    remaining: float
    has_unselected: bool
    status: ShareStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": format_fixed(self.total),
            "remaining": format_fixed(self.remaining),
            "has_unselected": self.has_unselected,
            "status": self.status.value,
        }


def _round_half_up(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def _copy(entries: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return [dict(entry) for entry in entries]


def redistribute_evenly(entries: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Equal shares; the first entry absorbs the rounding remainder."""
    result = _copy(entries)
    if not result:
        return result
    share = _round_half_up(100 / len(result))
    first_share = 100 - share * (len(result) - 1)
    for index, entry in enumerate(result):
        entry["percentage"] = format_fixed(first_share if index == 0 else share)
    return result


def redistribute_proportionally(
    entries: Sequence[Mapping[str, Any]],
    changed_index: int,
    new_value: Any,
) -> List[Dict[str, Any]]:
    """
    Fix one entry's share and rescale the others to fill the rest.

    When the other entries are all zero the rest is split evenly, the
    lowest index taking the remainder. A total still off by more than 0.01
    after rounding is corrected on the first other entry.
    """
    result = _copy(entries)
    if not result:
        return result
    if len(result) == 1:
        result[0]["percentage"] = "100"
        return result
    if not 0 <= changed_index < len(result):
        return result

    new_percent = parse_percent(new_value)
    remaining = 100 - new_percent
    others = [
        (index, parse_percent(entry.get("percentage")))
        for index, entry in enumerate(result)
        if index != changed_index
    ]
    other_total = sum(percent for _, percent in others)
    first_other = min(index for index, _ in others)

    if other_total > 0:
        for index, percent in others:
            result[index]["percentage"] = format_fixed(remaining * percent / other_total)
    else:
        even = remaining / len(others)
        for index, _ in others:
            if index == first_other:
                result[index]["percentage"] = format_fixed(remaining - even * (len(others) - 1))
            else:
                result[index]["percentage"] = format_fixed(even)

    result[changed_index]["percentage"] = format_fixed(new_percent)

    total = sum(parse_percent(entry.get("percentage")) for entry in result)
    if abs(total - 100) > 0.01:
        adjusted = parse_percent(result[first_other]["percentage"]) + (100 - total)
        result[first_other]["percentage"] = format_fixed(adjusted)
    return result


def summarize_backup_charities(entries: Sequence[Mapping[str, Any]]) -> BackupCharitySummary:
    """
    Total and status of the split.

    valid: exactly 100% with every slot selected; error: over 100% or an
    unselected slot; warning otherwise.
    """
    total = round(sum(parse_percent(entry.get("percentage")) for entry in entries), 2)
    has_unselected = any(not entry.get("charityId") for entry in entries)

    if total == 100 and not has_unselected:
        status = ShareStatus.VALID
    elif total > 100 or has_unselected:
        status = ShareStatus.ERROR
    else:
        status = ShareStatus.WARNING

    return BackupCharitySummary(
        total=total,
        remaining=round(100 - total, 2),
        has_unselected=has_unselected,
        status=status,
    )
