"""
Specific Gifts

Renders the intake's SpecificGifts entries into sentences appended to the
gifts article. Missing details keep a [[Token]] placeholder.
"""

from __future__ import annotations
from typing import Any, List, Mapping

from ..intake import IntakeSnapshot
from ..name_bank import resolve_name
from ..clauses.hydrator import placeholder


LAPSE_TAILS = {
    "per_stirpes": (
        " If such beneficiary does not survive me, this gift shall pass to his or her "
        "descendants, per stirpes."
    ),
    "per_capita": (
        " If such beneficiary does not survive me, this gift shall pass to my then living "
        "descendants, per capita."
    ),
    "residuary": " If such beneficiary does not survive me, this gift shall lapse to my residuary estate.",
}

SURVIVAL = ", if he or she survives me."


def _text(gift: Mapping[str, Any], key: str) -> str:
    value = gift.get(key)
    return str(value).strip() if value is not None else ""


def beneficiary_name(gift: Mapping[str, Any], snapshot: IntakeSnapshot) -> str:
    custom = _text(gift, "benCustom")
    if custom:
        return custom
    entity = snapshot.entity(gift.get("benRef"))
    if entity is not None:
        name = resolve_name(entity)
        if name:
            return name
    return placeholder("BeneficiaryName")


def render_specific_gift(gift: Mapping[str, Any], snapshot: IntakeSnapshot) -> str:
    """One gift sentence with its lapse tail and notes."""
    gift_type = gift.get("type") or "item"
    beneficiary = beneficiary_name(gift, snapshot)

    if gift_type == "cash":
        base = f"I give the sum of {_text(gift, 'amount') or placeholder('Amount')} to {beneficiary}{SURVIVAL}"
    elif gift_type == "item":
        base = f"I give my {_text(gift, 'what') or placeholder('ItemDescription')} to {beneficiary}{SURVIVAL}"
    elif gift_type == "percent":
        percent = _text(gift, "percent") or placeholder("Percent")
        base = f"I give {percent}% of my tangible personal property to {beneficiary}{SURVIVAL}"
    elif gift_type == "real_property":
        address = _text(gift, "rpAddr") or placeholder("PropertyAddress")
        base = f"I give my real property located at {address} to {beneficiary}{SURVIVAL}"
    elif gift_type == "digital":
        platform = _text(gift, "digPlatform") or placeholder("Platform")
        ident = _text(gift, "digId")
        detail = f"{platform} — {ident}" if ident else platform
        base = f"I give my digital asset ({detail}) to {beneficiary}."
    else:
        base = f"I give {_text(gift, 'otherText') or placeholder('GiftText')} to {beneficiary}."

    predecease = gift.get("predecease")
    tail = LAPSE_TAILS.get(predecease, "")
    if predecease == "alternates" and _text(gift, "alternates"):
        tail = (
            " If such beneficiary does not survive me, this gift shall instead pass to "
            f"{_text(gift, 'alternates')}."
        )

    notes = _text(gift, "notes")
    return f"{base}{tail}{' ' + notes if notes else ''}".strip()


def render_specific_gifts(snapshot: IntakeSnapshot) -> List[str]:
    gifts = [g for g in snapshot.list_of("SpecificGifts") if isinstance(g, Mapping)]
    rendered = (render_specific_gift(gift, snapshot) for gift in gifts)
    return [text for text in rendered if text]
