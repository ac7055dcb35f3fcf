from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timezone

from dateutil import parser as date_parser

from signal_intel.models.schemas import Signal, Timestamp

logger = logging.getLogger(__name__)

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Two defaults that differ in year, month and day; a partial string takes
# its missing fields from them and so parses differently against each.
_PARTIAL_DEFAULTS = (datetime(1904, 1, 1), datetime(1908, 2, 2))


def parse_timestamp(value: Timestamp | date) -> datetime | None:
    """Parse a raw timestamp into a UTC datetime, or None if unusable.

    Naive values are taken as UTC. Strings that do not name a full calendar
    date, or that fall outside the representable range once in UTC, are
    unusable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str):
        logger.debug("Ignoring timestamp of type %s", type(value).__name__)
        return None

    cleaned = value.strip()
    if not cleaned:
        return None
    if _DATE_ONLY_RE.match(cleaned):
        cleaned = cleaned + "T00:00:00"
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return _to_utc(datetime.fromisoformat(cleaned))
    except (ValueError, OverflowError):
        pass

    try:
        first, second = (
            date_parser.parse(cleaned, default=default) for default in _PARTIAL_DEFAULTS
        )
    except (ValueError, OverflowError):
        logger.debug("Unparsable timestamp: %r", value)
        return None
    if first != second:
        logger.debug("Timestamp without a full date: %r", value)
        return None
    return _to_utc(first)


def _to_utc(moment: datetime) -> datetime | None:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    try:
        return moment.astimezone(timezone.utc)
    except OverflowError:
        logger.debug("Timestamp out of range in UTC: %s", moment)
        return None


def effective_date(signal: Signal) -> datetime | None:
    published = parse_timestamp(signal.published_at)
    if published is not None:
        return published
    return parse_timestamp(signal.created_at)


def utc_day(moment: datetime) -> date:
    return moment.astimezone(timezone.utc).date()


def utc_day_key(moment: datetime) -> str:
    return utc_day(moment).isoformat()
