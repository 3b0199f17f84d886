"""Bonus resolution: selected bonus codes → ordered checkbox entries for the cover page"""

from datetime import date
from typing import List, NamedTuple, Optional, Tuple

from contract_engine.domain.fields import LookupStrategy, resolve_first
from contract_engine.domain.models import BonusDisplayEntry, BonusFields, BonusSelection
from contract_engine.utils.date_utils import format_date, parse_date

NOT_APPLICABLE = "NAO_SE_APLICA"
HUNDRED_DAYS = "CEM_DIAS"
IMMERSION = "IMERSAO"
OTHER = "OUTROS"

# Display order of the known bonuses (after the "not applicable" entry)
BONUS_CATALOG: Tuple[Tuple[str, str], ...] = (
    (HUNDRED_DAYS, "100 dias"),
    (IMMERSION, "Inscrições Imersão Prosperar"),
    (OTHER, "Outros"),
)

CODE_ALIASES = {
    "IPR": IMMERSION,
    "100_DIAS": HUNDRED_DAYS,
}

BLANK_COUNT = "___"
BLANK_DATE = "___/___/___"
BLANK_TEXT = "_______________"


class _ImmersionContext(NamedTuple):
    fields: BonusFields
    event_start: Optional[date]


def _explicit_immersion_date(context: _ImmersionContext) -> Optional[str]:
    value = context.fields.immersion_date
    if not value:
        return None
    parsed = parse_date(value)
    return format_date(parsed) if parsed else value


IMMERSION_DATE_STRATEGIES: Tuple[LookupStrategy, ...] = (
    LookupStrategy("explicit_field", _explicit_immersion_date),
    LookupStrategy("related_event_start", lambda context: format_date(context.event_start)),
)


def normalize_codes(codes) -> frozenset:
    """Upper-case codes and map legacy identifiers onto catalog codes"""
    normalized = set()
    for code in codes or ():
        key = str(code).strip().upper()
        if key:
            normalized.add(CODE_ALIASES.get(key, key))
    return frozenset(normalized)


def resolve_immersion_date(fields: BonusFields, event_start: Optional[date] = None) -> str:
    """Explicit date field, else the related event's start date, else blank"""
    value, _ = resolve_first(IMMERSION_DATE_STRATEGIES, _ImmersionContext(fields, event_start))
    return value


def _detail_text(code: str, fields: BonusFields, event_start: Optional[date]) -> Optional[str]:
    if code == IMMERSION:
        count = (fields.immersion_enrollments or "").strip() or BLANK_COUNT
        event_date = resolve_immersion_date(fields, event_start) or BLANK_DATE
        return f"Inscrições: {count} - Data: {event_date}"
    if code == OTHER:
        return (fields.other_description or "").strip() or BLANK_TEXT
    return None


def resolve_bonuses(selection: BonusSelection, related_event_start: Optional[date] = None) -> List[BonusDisplayEntry]:
    """
    Build the bonus checkbox list in fixed display order.

    Rules:
    1. "Não se aplica" is checked iff no code is selected
    2. Every catalog bonus is listed; it is checked iff its code is selected,
       and only checked bonuses carry detail text
    3. Unknown codes are ignored

    Never raises: missing supplemental values print as blank placeholders.
    """
    selected = normalize_codes(selection.selected_codes)

    entries = [
        BonusDisplayEntry(
            code=NOT_APPLICABLE,
            label="Não se aplica",
            checked=not selected,
        )
    ]

    for code, label in BONUS_CATALOG:
        checked = code in selected
        entries.append(
            BonusDisplayEntry(
                code=code,
                label=label,
                checked=checked,
                detail_text=_detail_text(code, selection.fields, related_event_start) if checked else None,
            )
        )

    return entries
