# purchase_planning/utils/date_utils.py
import re
from datetime import date, datetime
from typing import List, Optional, Tuple

MONTH_NAMES_ES = [
    'enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio',
    'julio', 'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre'
]

_MONTH_KEY_RE = re.compile(r'^(\d{4})-(\d{2})$')
_ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')
_LATIN_DATE_RE = re.compile(r'^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})')

def month_key(year: int, month: int) -> str:
    """Format a year and month as a ``YYYY-MM`` key."""
    return f"{year:04d}-{month:02d}"

def month_key_from_iso(iso_date: str) -> str:
    """Extract the ``YYYY-MM`` key from a stored ``YYYY-MM-DD`` string.

    The key is sliced straight from the string. Converting to a date object
    first can shift first/last-day-of-month rows into the adjacent month
    when a timezone is involved.
    """
    return str(iso_date)[:7]

def parse_month_key(key: str) -> Optional[Tuple[int, int]]:
    """Parse a ``YYYY-MM`` key.

    Args:
        key: Month key

    Returns:
        Tuple with year and month, or None if the key is malformed
    """
    if not key:
        return None

    match = _MONTH_KEY_RE.match(str(key).strip())
    if not match:
        return None

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return None

    return (year, month)

def add_months(key: str, n: int) -> str:
    """Shift a month key by ``n`` months (negative goes back)."""
    parsed = parse_month_key(key)
    if parsed is None:
        raise ValueError(f"Invalid month key: {key}")

    year, month = parsed
    index = year * 12 + (month - 1) + n
    return month_key(index // 12, index % 12 + 1)

def months_between(start_key: str, end_key: str) -> List[str]:
    """List every month key from ``start_key`` to ``end_key``, inclusive.

    Returns an empty list when the start is after the end.
    """
    months = []
    current = start_key
    while current <= end_key:
        months.append(current)
        current = add_months(current, 1)
    return months

def month_start_iso(key: str) -> str:
    """First day of the month as ``YYYY-MM-DD``."""
    return f"{key}-01"

def next_month_start_iso(key: str) -> str:
    """First day of the following month, used as an exclusive upper bound."""
    return month_start_iso(add_months(key, 1))

def get_current_month(today: Optional[date] = None) -> str:
    """Get the month key of today (or of the given date)."""
    today = today or date.today()
    return month_key(today.year, today.month)

def month_label(key: str) -> str:
    """Human readable Spanish label, e.g. ``octubre 2025``."""
    parsed = parse_month_key(key)
    if parsed is None:
        return str(key)
    year, month = parsed
    return f"{MONTH_NAMES_ES[month - 1]} {year}"

def normalize_to_ymd(raw) -> str:
    """Normalize a stored date value to ``YYYY-MM-DD``.

    Accepts ISO strings (with or without a time part), ``DD/MM/YYYY`` and
    ``DD-MM-YYYY`` strings and date/datetime objects.

    Returns:
        Normalized date string, or '' if the value cannot be read
    """
    if raw is None or raw == '':
        return ''

    if isinstance(raw, datetime):
        return raw.date().isoformat()

    if isinstance(raw, date):
        return raw.isoformat()

    s = str(raw).strip()

    iso_match = _ISO_DATE_RE.match(s)
    if iso_match:
        y, m, d = iso_match.groups()
        return f"{y}-{m}-{d}"

    latin_match = _LATIN_DATE_RE.match(s)
    if latin_match:
        dd, mm, yyyy = latin_match.groups()
        return f"{yyyy}-{mm.zfill(2)}-{dd.zfill(2)}"

    return ''
