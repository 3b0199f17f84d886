"""Date parsing and display utilities"""

from datetime import date, datetime
from typing import Any, Optional

_INPUT_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y")


def parse_date(value: Any) -> Optional[date]:
    """Parse ISO or dd/mm/yyyy dates; anything unparsable becomes None"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    # Timestamps such as "2025-03-01T00:00:00.000Z"
    text = text.split("T", 1)[0]
    for fmt in _INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: Optional[date]) -> str:
    """Render a date as dd/mm/yyyy, blank when missing"""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")
