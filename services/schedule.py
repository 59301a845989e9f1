"""Due-date arithmetic for recurring transactions.

Month-based frequencies clamp to the last day of the target month, so a
Jan 31 anchor becomes Feb 29 (leap year) or Feb 28. The anchor is always the
previous due date, which makes the clamp sticky: Jan 31, Feb 29, Mar 29, ...
"""
import logging
from datetime import date
from typing import Iterator

from utils.constants import DAY_INTERVALS, DEFAULT_FREQUENCY, FREQUENCIES, MONTH_INTERVALS
from utils.date_helpers import add_days, add_months
from utils.errors import InvalidArgument

logger = logging.getLogger(__name__)


def normalize_frequency(frequency: str) -> str:
    """Validate a user-supplied frequency tag. Raises InvalidArgument."""
    tag = (frequency or "").strip().lower()
    if tag not in FREQUENCIES:
        raise InvalidArgument(
            f"Invalid frequency: {frequency!r}. Expected one of {', '.join(FREQUENCIES)}."
        )
    return tag


def next_due_date(frequency: str, anchor: date) -> date:
    """Return the due date following anchor. Unknown frequencies use the monthly rule."""
    if frequency in DAY_INTERVALS:
        return add_days(anchor, DAY_INTERVALS[frequency])
    if frequency not in MONTH_INTERVALS:
        logger.warning("Unknown frequency %r, falling back to %s", frequency, DEFAULT_FREQUENCY)
        frequency = DEFAULT_FREQUENCY
    return add_months(anchor, MONTH_INTERVALS[frequency])


def iter_due_dates(
    frequency: str,
    first_due: date,
    until: date,
    end_date: date | None = None,
) -> Iterator[date]:
    """Yield first_due and each following due date while <= until (and <= end_date)."""
    current = first_due
    while current <= until and (end_date is None or current <= end_date):
        yield current
        current = next_due_date(frequency, current)
