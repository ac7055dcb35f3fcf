from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property
from typing import Any

SIGNAL_TYPES = (
    "news",
    "press_release",
    "job_posting",
    "funding",
    "executive_change",
    "product_launch",
    "partnership",
    "acquisition",
    "website_change",
    "social_media",
    "regulatory",
    "earnings",
    "other",
)

ALERT_TRIGGER_TYPES = (
    "any_signal",
    "funding_announcement",
    "executive_change",
    "product_launch",
    "partnership",
    "acquisition",
    "negative_news",
    "positive_news",
    "job_posting_spike",
    "custom_keyword",
)

PRIORITIES = ("high", "medium", "low")
DEFAULT_PRIORITY = "medium"

CONTENT_STATUSES = ("new", "reviewing", "writing", "published")

UNKNOWN_COMPANY = "Unknown Company"

# Raw timestamp as handed over by persistence; parsed lazily.
Timestamp = str | datetime | None


@dataclass
class Company:
    company_id: str
    name: str
    industry: str = ""
    location: str = ""
    size: str = ""
    founded_year: int | None = None
    website: str = ""
    rss_feed_url: str = ""
    linkedin_url: str = ""
    twitter_handle: str = ""
    is_active: bool = True


@dataclass
class Signal:
    signal_id: str
    company_id: str
    type: str
    title: str
    body: str = ""
    priority: str | None = None
    entities: Any = None
    published_at: Timestamp = None
    created_at: Timestamp = ""
    is_read: bool = False
    is_bookmarked: bool = False
    content_status: str = "new"
    notes: str = ""
    summary: str = ""

    @property
    def effective_priority(self) -> str:
        return self.priority or DEFAULT_PRIORITY


@dataclass
class AlertRule:
    rule_id: str
    name: str
    trigger_type: str
    company_id: str | None = None
    keywords: list[str] = field(default_factory=list)
    notification_channel: str = "dashboard"
    is_active: bool = True


@dataclass
class AlertMatch:
    match_id: str
    rule_id: str
    rule_name: str
    signal_id: str
    signal_title: str
    company_id: str
    company_name: str
    trigger_type: str
    notification_channel: str
    dedupe_key: str
    created_at: str
    status: str


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of companies, signals and alert rules for one pass."""

    companies: tuple[Company, ...] = ()
    signals: tuple[Signal, ...] = ()
    alert_rules: tuple[AlertRule, ...] = ()

    @cached_property
    def _companies_by_id(self) -> dict[str, Company]:
        return {company.company_id: company for company in self.companies}

    def company_index(self) -> dict[str, Company]:
        return dict(self._companies_by_id)

    def company_for(self, signal: Signal) -> Company | None:
        return self._companies_by_id.get(signal.company_id)

    def company_name(self, company_id: str) -> str:
        company = self._companies_by_id.get(company_id)
        if company is None or not company.name:
            return UNKNOWN_COMPANY
        return company.name
