from datetime import date, datetime
from utils.constants import DATE_FORMAT


def today() -> date:
    return date.today()


def today_str() -> str:
    return date.today().strftime(DATE_FORMAT)


def now_iso() -> str:
    """Current local timestamp as an ISO-8601 string (used for record dates)."""
    return datetime.now().isoformat(timespec="seconds")


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure.

    Full ISO-8601 timestamps are accepted too; only the date part is kept.
    """
    if not date_str:
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(date_str.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_timestamp(value: str) -> datetime | None:
    """Parse a date or ISO-8601 timestamp, returning a naive datetime or None."""
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        d = parse_date(value)
        return datetime.combine(d, datetime.min.time()) if d else None
    return ts.replace(tzinfo=None)


def chronological_key(value: str) -> datetime:
    """Sort key for stored date strings; unparseable values sort first."""
    return parse_timestamp(value) or datetime.min


def days_until(date_str: str, ref: date | None = None) -> int | None:
    d = parse_date(date_str)
    if d is None:
        return None
    return (d - (ref or today())).days
