from datetime import date, datetime, timedelta
import calendar
from utils.constants import DATE_FORMAT, MONTH_FORMAT
from utils.errors import InvalidArgument

_ACCEPTED_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d")


def today() -> date:
    return date.today()


def current_month_str() -> str:
    return format_month(today())


def parse_date(date_str: str) -> date | None:
    """Parse a stored or user-entered date string, returning None on failure."""
    if not date_str:
        return None
    for fmt in _ACCEPTED_DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    return None


def coerce_date(value, field: str = "date") -> date:
    """Accept a date (or datetime) or a YYYY-MM-DD string; raise InvalidArgument otherwise."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        parsed = parse_date(value.strip())
        if parsed is not None:
            return parsed
    raise InvalidArgument(f"Invalid {field}: {value!r}. Use YYYY-MM-DD.")


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def format_month(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def parse_month(month_str: str) -> date | None:
    """First day of a YYYY-MM month, or None."""
    if not month_str:
        return None
    try:
        return datetime.strptime(month_str, MONTH_FORMAT).date()
    except ValueError:
        return None


def month_bounds(month_str: str) -> tuple[date, date]:
    """Return (first_day, last_day) for a YYYY-MM month."""
    first = parse_month(month_str)
    if first is None:
        raise InvalidArgument(f"Invalid month: {month_str}")
    return first, first.replace(day=days_in_month(first.year, first.month))


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def add_months(d: date, n: int) -> date:
    """Shift d by n calendar months (n may be negative), clamping to the month's last day."""
    index = d.year * 12 + d.month - 1 + n
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(d.day, days_in_month(year, month)))


def friendly_month(month_str: str) -> str:
    """Convert YYYY-MM to e.g. 'February 2026'."""
    d = parse_month(month_str)
    if d is None:
        return month_str
    return d.strftime("%B %Y")
