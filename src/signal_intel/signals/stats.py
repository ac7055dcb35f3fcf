from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from signal_intel.models.schemas import Snapshot
from signal_intel.signals.dates import effective_date

IN_PROGRESS_STATUSES = {"reviewing", "writing"}


@dataclass
class SignalStats:
    company_count: int
    signal_count: int
    unread_count: int
    active_alert_count: int
    bookmarked_count: int
    in_progress_count: int
    last_signal_at: datetime | None


def compute_stats(snapshot: Snapshot, company_id: str | None = None) -> SignalStats:
    """Dashboard counters, optionally narrowed to one company's signals."""
    signals = [
        signal
        for signal in snapshot.signals
        if company_id is None or signal.company_id == company_id
    ]
    dates = [moment for moment in map(effective_date, signals) if moment is not None]

    return SignalStats(
        company_count=len(snapshot.companies),
        signal_count=len(signals),
        unread_count=sum(1 for signal in signals if not signal.is_read),
        active_alert_count=sum(1 for rule in snapshot.alert_rules if rule.is_active),
        bookmarked_count=sum(1 for signal in signals if signal.is_bookmarked),
        in_progress_count=sum(
            1 for signal in signals if signal.content_status in IN_PROGRESS_STATUSES
        ),
        last_signal_at=max(dates) if dates else None,
    )
