from __future__ import annotations

from pathlib import Path

from signal_intel.config import AppConfig
from signal_intel.models.schemas import AlertRule, Company, Signal, Snapshot
from signal_intel.storage.csv_store import (
    parse_bool,
    parse_int,
    parse_json,
    parse_list,
    read_csv,
)


def load_companies(path: Path) -> list[Company]:
    companies: list[Company] = []
    for row in read_csv(path):
        companies.append(
            Company(
                company_id=row.get("company_id", ""),
                name=row.get("name", ""),
                industry=row.get("industry", ""),
                location=row.get("location", ""),
                size=row.get("size", ""),
                founded_year=parse_int(row.get("founded_year")),
                website=row.get("website", ""),
                rss_feed_url=row.get("rss_feed_url", ""),
                linkedin_url=row.get("linkedin_url", ""),
                twitter_handle=row.get("twitter_handle", ""),
                is_active=parse_bool(row.get("is_active", ""), True),
            )
        )
    return companies


def load_signals(path: Path) -> list[Signal]:
    signals: list[Signal] = []
    for row in read_csv(path):
        signals.append(
            Signal(
                signal_id=row.get("signal_id", ""),
                company_id=row.get("company_id", ""),
                type=row.get("type", ""),
                title=row.get("title", ""),
                body=row.get("body", ""),
                priority=row.get("priority") or None,
                entities=parse_json(row.get("entities")),
                published_at=row.get("published_at") or None,
                created_at=row.get("created_at", ""),
                is_read=parse_bool(row.get("is_read", ""), False),
                is_bookmarked=parse_bool(row.get("is_bookmarked", ""), False),
                content_status=row.get("content_status") or "new",
                notes=row.get("notes", ""),
                summary=row.get("summary", ""),
            )
        )
    return signals


def load_alert_rules(path: Path) -> list[AlertRule]:
    rules: list[AlertRule] = []
    for row in read_csv(path):
        rules.append(
            AlertRule(
                rule_id=row.get("rule_id", ""),
                name=row.get("name", ""),
                trigger_type=row.get("trigger_type", ""),
                company_id=row.get("company_id") or None,
                keywords=parse_list(row.get("keywords")),
                notification_channel=row.get("notification_channel") or "dashboard",
                is_active=parse_bool(row.get("is_active", ""), True),
            )
        )
    return rules


def load_snapshot(config: AppConfig) -> Snapshot:
    return Snapshot(
        companies=tuple(load_companies(config.companies_csv)),
        signals=tuple(load_signals(config.signals_csv)),
        alert_rules=tuple(load_alert_rules(config.alert_rules_csv)),
    )
