import re
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from resort.core.config import settings

_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def parse_date(value: str | None) -> date | None:
    """Parse a strict YYYY-MM-DD string. Returns None for anything else, including 2024-02-30."""
    if not value or not _DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def format_date(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def resort_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def today() -> date:
    return datetime.now(resort_tz()).date()


def is_past_date(d: date) -> bool:
    return d < today()


def hours_until(d: date) -> int:
    """Whole hours from now until resort-local midnight at the start of `d` (negative once passed)."""
    start = datetime(d.year, d.month, d.day, tzinfo=resort_tz())
    return int((start - utcnow()).total_seconds() // 3600)


def iter_days(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


_MONTHS_EN = ("January", "February", "March", "April", "May", "June",
              "July", "August", "September", "October", "November", "December")
_MONTHS_AR = ("يناير", "فبراير", "مارس", "أبريل", "مايو", "يونيو",
              "يوليو", "أغسطس", "سبتمبر", "أكتوبر", "نوفمبر", "ديسمبر")


def format_date_localized(d: date, language: str | None) -> str:
    if language == "en":
        return f"{d.day} {_MONTHS_EN[d.month - 1]} {d.year}"
    return f"{d.day} {_MONTHS_AR[d.month - 1]} {d.year}"
