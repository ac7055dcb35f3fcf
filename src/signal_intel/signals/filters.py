from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

from signal_intel.models.schemas import Company, Signal
from signal_intel.signals.dates import effective_date
from signal_intel.signals.entities import extract_entity_names

logger = logging.getLogger(__name__)

ALL = "all"
DATE_RANGES = (ALL, "today", "week", "month", "quarter")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class FilterCriteria:
    """Conjunctive signal filters. Defaults restrict nothing."""

    types: frozenset[str] = field(default_factory=frozenset)
    priorities: frozenset[str] = field(default_factory=frozenset)
    status: str = ALL
    bookmarked: bool = False
    unread: bool = False
    entity_query: str = ""
    industry: str = ALL
    date_range: str = ALL
    company_id: str | None = None
    text_query: str = ""

    @classmethod
    def build(
        cls,
        *,
        types: Iterable[str] = (),
        priorities: Iterable[str] = (),
        **kwargs,
    ) -> FilterCriteria:
        return cls(
            types=frozenset(types),
            priorities=frozenset(priorities),
            **kwargs,
        )


DEFAULT_FILTERS = FilterCriteria()


def active_filter_count(criteria: FilterCriteria) -> int:
    return (
        len(criteria.types)
        + len(criteria.priorities)
        + (criteria.date_range != ALL)
        + (criteria.status != ALL)
        + criteria.bookmarked
        + criteria.unread
        + bool(criteria.entity_query.strip())
        + (criteria.industry != ALL)
        + (criteria.company_id is not None)
        + bool(criteria.text_query.strip())
    )


def has_active_filters(criteria: FilterCriteria) -> bool:
    return active_filter_count(criteria) > 0


def date_range_cutoff(date_range: str, now: datetime) -> datetime:
    """Earliest effective date kept by a date range, relative to ``now``."""
    if date_range == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_range == "week":
        return now - timedelta(days=7)
    if date_range == "month":
        return now - relativedelta(months=1)
    if date_range == "quarter":
        return now - relativedelta(months=3)
    if date_range != ALL:
        logger.warning("Unknown date range %r, not filtering by date", date_range)
    return EPOCH


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _matches_entity_query(signal: Signal, query: str) -> bool:
    return any(query in name for name in extract_entity_names(signal.entities))


def _matches_text_query(signal: Signal, query: str) -> bool:
    for text in (signal.title, signal.body, signal.summary):
        if text and query in str(text).lower():
            return True
    return False


def _matches_industry(
    signal: Signal,
    industry: str,
    companies: dict[str, Company],
) -> bool:
    company = companies.get(signal.company_id)
    if company is None:
        return False
    return company.industry == industry


def _keep(
    signal: Signal,
    criteria: FilterCriteria,
    companies: dict[str, Company],
    entity_query: str,
    text_query: str,
    cutoff: datetime | None,
) -> bool:
    if criteria.types and signal.type not in criteria.types:
        return False
    if criteria.priorities and signal.effective_priority not in criteria.priorities:
        return False
    if criteria.status != ALL and signal.content_status != criteria.status:
        return False
    if criteria.bookmarked and signal.is_bookmarked is not True:
        return False
    if criteria.unread and signal.is_read is not False:
        return False
    if criteria.company_id is not None and signal.company_id != criteria.company_id:
        return False
    if entity_query and not _matches_entity_query(signal, entity_query):
        return False
    if text_query and not _matches_text_query(signal, text_query):
        return False
    if criteria.industry != ALL and not _matches_industry(
        signal, criteria.industry, companies
    ):
        return False
    if cutoff is not None:
        moment = effective_date(signal)
        if moment is None or moment < cutoff:
            return False
    return True


def sort_by_recency(signals: Iterable[Signal]) -> list[Signal]:
    """Stable sort, newest effective date first, undated signals last."""
    dated: list[tuple[datetime, Signal]] = []
    undated: list[Signal] = []
    for signal in signals:
        moment = effective_date(signal)
        if moment is None:
            undated.append(signal)
        else:
            dated.append((moment, signal))
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [signal for _, signal in dated] + undated


def filter_signals(
    signals: Iterable[Signal],
    companies: Iterable[Company],
    criteria: FilterCriteria = DEFAULT_FILTERS,
    now: datetime | None = None,
) -> list[Signal]:
    """Apply every active criterion and order the survivors by recency.

    Inputs are never mutated. A signal that cannot be evaluated for a
    predicate (missing company, unparsable date) only fails that predicate.
    """
    company_index = {company.company_id: company for company in companies}
    entity_query = criteria.entity_query.strip().lower()
    text_query = criteria.text_query.strip().lower()

    cutoff: datetime | None = None
    if criteria.date_range != ALL:
        reference = now if now is not None else _local_now()
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        cutoff = date_range_cutoff(criteria.date_range, reference)

    survivors = [
        signal
        for signal in signals
        if _keep(signal, criteria, company_index, entity_query, text_query, cutoff)
    ]
    return sort_by_recency(survivors)
