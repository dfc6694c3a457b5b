"""
Date helpers for course schedules.

Schedules are stored as ISO-like strings ('2026-10-19T10:00', '2026-10-19',
'2026-10-19T10:00:00Z'). Display follows the studio's German conventions:

    long   19.10.2026 um 10:00 Uhr
    short  19. Okt.
    time   10:00

Every formatter returns '—' for a missing value and the raw string when it
cannot be parsed, so a bad value is still visible in the UI.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

PLACEHOLDER = "—"

# German abbreviated month names (date-fns "de" locale)
MONTHS_SHORT_DE = ["Jan.", "Feb.", "März", "Apr.", "Mai", "Juni", "Juli", "Aug.", "Sep.", "Okt.", "Nov.", "Dez."]


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or date-time into a naive local datetime.

    Offsets (including 'Z') are converted to local time. Returns None for
    empty or unparsable input.
    """
    if not value or not value.strip():
        return None
    s = value.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def format_date_time(value: Optional[str]) -> str:
    if not value:
        return PLACEHOLDER
    dt = parse_iso(value)
    if dt is None:
        return value
    return f"{dt:%d.%m.%Y} um {dt:%H:%M} Uhr"


def format_date_short(value: Optional[str]) -> str:
    if not value:
        return PLACEHOLDER
    dt = parse_iso(value)
    if dt is None:
        return value
    return f"{dt:%d}. {MONTHS_SHORT_DE[dt.month - 1]}"


def format_time(value: Optional[str]) -> str:
    if not value:
        return PLACEHOLDER
    dt = parse_iso(value)
    if dt is None:
        return value
    return f"{dt:%H:%M}"


def is_today(value: Optional[str], today: Optional[date] = None) -> bool:
    dt = parse_iso(value)
    if dt is None:
        return False
    return dt.date() == (today or date.today())


def is_today_or_future(value: Optional[str], today: Optional[date] = None) -> bool:
    dt = parse_iso(value)
    if dt is None:
        return False
    return dt.date() >= (today or date.today())


def tomorrow_default(now: Optional[datetime] = None) -> str:
    """
    Default schedule for new courses: tomorrow at 10:00 local time.
    """
    d = (now or datetime.now()).date() + timedelta(days=1)
    return f"{d:%Y-%m-%d}T10:00"


def schedule_sort_key(value: Optional[str]) -> str:
    """
    Lexical sort key; missing or unparsable schedules become '' and sort first.
    """
    if not value or parse_iso(value) is None:
        return ""
    return value
