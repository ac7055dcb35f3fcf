from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from signal_intel.models.schemas import Signal
from signal_intel.signals.dates import effective_date, utc_day

logger = logging.getLogger(__name__)


@dataclass
class TimelineGroup:
    key: str
    label: str
    date: datetime
    signals: list[Signal] = field(default_factory=list)


@dataclass
class TimelineResult:
    groups: list[TimelineGroup]
    unbucketed_count: int = 0

    @property
    def bucketed_count(self) -> int:
        return sum(len(group.signals) for group in self.groups)


def _week_start(day: date) -> date:
    # Weeks start on Sunday.
    return day - timedelta(days=(day.weekday() + 1) % 7)


def group_label(day: date, now: datetime) -> str:
    """Human label for a UTC calendar day relative to ``now``."""
    today = utc_day(now)
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    if _week_start(day) == _week_start(today):
        return day.strftime("%A")
    if (day.year, day.month) == (today.year, today.month):
        return f"{day.strftime('%B')} {day.day}"
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def bucket_signals(
    ordered_signals: Iterable[Signal],
    now: datetime | None = None,
) -> TimelineResult:
    """Group already-ordered signals into UTC-day sections.

    Input order is preserved inside each group, and groups come out in the
    order their first signal appears. Signals without a usable effective
    date are left out and counted in ``unbucketed_count``.
    """
    reference = now if now is not None else datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)

    groups: dict[str, TimelineGroup] = {}
    unbucketed = 0
    for signal in ordered_signals:
        moment = effective_date(signal)
        if moment is None:
            unbucketed += 1
            continue
        day = utc_day(moment)
        key = day.isoformat()
        group = groups.get(key)
        if group is None:
            group = TimelineGroup(
                key=key,
                label=group_label(day, reference),
                date=datetime.combine(day, time.min, tzinfo=timezone.utc),
            )
            groups[key] = group
        group.signals.append(signal)

    if unbucketed:
        logger.debug("%d signals without a usable date left out of the timeline", unbucketed)

    return TimelineResult(groups=list(groups.values()), unbucketed_count=unbucketed)
