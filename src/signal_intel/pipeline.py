import argparse
import os
import uuid
from dataclasses import asdict, fields
from datetime import datetime, timezone
from pathlib import Path

from signal_intel.alerts.dispatcher import dispatch_matches
from signal_intel.config import AppConfig, configure_logging, load_config
from signal_intel.models.schemas import AlertMatch, Signal, Snapshot
from signal_intel.signals.filters import (
    DATE_RANGES,
    FilterCriteria,
    active_filter_count,
    filter_signals,
    sort_by_recency,
)
from signal_intel.signals.stats import compute_stats
from signal_intel.signals.timeline import bucket_signals
from signal_intel.storage.csv_store import read_csv, write_csv
from signal_intel.storage.snapshot import load_snapshot
from signal_intel.triggers.matcher import evaluate


def _build_dedupe_key(rule_id: str, signal_id: str) -> str:
    return f"{rule_id}|{signal_id}"


def build_matches(
    snapshot: Snapshot,
    signal: Signal,
    created_at: str,
) -> list[AlertMatch]:
    company = snapshot.company_for(signal)
    company_name = snapshot.company_name(signal.company_id)
    matches: list[AlertMatch] = []
    for rule in evaluate(snapshot.alert_rules, signal, company):
        matches.append(
            AlertMatch(
                match_id=str(uuid.uuid4()),
                rule_id=rule.rule_id,
                rule_name=rule.name,
                signal_id=signal.signal_id,
                signal_title=signal.title,
                company_id=signal.company_id,
                company_name=company_name,
                trigger_type=rule.trigger_type,
                notification_channel=rule.notification_channel,
                dedupe_key=_build_dedupe_key(rule.rule_id, signal.signal_id),
                created_at=created_at,
                status="new",
            )
        )
    return matches


def load_existing_match_keys(path: Path) -> set[str]:
    keys: set[str] = set()
    for row in read_csv(path):
        dedupe_key = row.get("dedupe_key", "")
        if not dedupe_key:
            rule_id = row.get("rule_id", "")
            signal_id = row.get("signal_id", "")
            if not rule_id or not signal_id:
                continue
            dedupe_key = _build_dedupe_key(rule_id, signal_id)
        keys.add(dedupe_key)
    return keys


def _match_fieldnames() -> list[str]:
    return [field.name for field in fields(AlertMatch)]


def update_match_statuses(path: Path, match_ids: set[str], status: str) -> None:
    if not match_ids:
        return

    rows = read_csv(path)
    if not rows:
        return

    for row in rows:
        if row.get("match_id") in match_ids:
            row["status"] = status

    write_csv(path, rows, list(rows[0].keys()), append=False)


def _is_env_override(name: str) -> bool:
    return bool(os.getenv(name))


def _print_provenance(config: AppConfig, snapshot: Snapshot) -> None:
    active_rules = [rule for rule in snapshot.alert_rules if rule.is_active]
    print("PROVENANCE")
    for label, path, env_name in (
        ("companies_csv", config.companies_csv, "COMPANIES_CSV"),
        ("signals_csv", config.signals_csv, "SIGNALS_CSV"),
        ("alert_rules_csv", config.alert_rules_csv, "ALERT_RULES_CSV"),
        ("alert_matches_csv", config.alert_matches_csv, "ALERT_MATCHES_CSV"),
    ):
        print(
            f"Using {label}: {path.resolve()} "
            f"(override: {_is_env_override(env_name)})"
        )
    print(
        f"companies: rows_loaded={len(snapshot.companies)} | "
        f"signals: rows_loaded={len(snapshot.signals)} | "
        f"alert_rules: rows_loaded={len(snapshot.alert_rules)} "
        f"active={len(active_rules)}"
    )


def _signals_to_evaluate(snapshot: Snapshot, backfill: bool) -> list[Signal]:
    ordered = sort_by_recency(snapshot.signals)
    if backfill:
        return ordered
    return [signal for signal in ordered if not signal.is_read]


def run_alerts(config: AppConfig) -> list[AlertMatch]:
    if (
        config.alerts_enabled
        and config.alert_channel == "slack"
        and not config.slack_webhook_url
    ):
        print(
            "ERROR: ALERTS_ENABLED=true and ALERT_CHANNEL=slack, but "
            "SLACK_WEBHOOK_URL is empty."
        )
        raise SystemExit(1)

    snapshot = load_snapshot(config)
    _print_provenance(config, snapshot)

    created_at = datetime.now(timezone.utc).isoformat()
    signals = _signals_to_evaluate(snapshot, config.backfill_enabled)
    all_matches: list[AlertMatch] = []
    for signal in signals:
        all_matches.extend(build_matches(snapshot, signal, created_at))

    existing_keys = load_existing_match_keys(config.alert_matches_csv)
    new_matches: list[AlertMatch] = []
    for match in all_matches:
        if match.dedupe_key in existing_keys:
            continue
        existing_keys.add(match.dedupe_key)
        new_matches.append(match)

    print(
        f"Signals evaluated: {len(signals)} | "
        f"Alert matches: {len(new_matches)} | "
        f"Dedupe skipped: {len(all_matches) - len(new_matches)}"
    )

    if new_matches:
        rows = [asdict(match) for match in new_matches]
        write_csv(config.alert_matches_csv, rows, _match_fieldnames(), append=True)

    sent_ids = dispatch_matches(
        new_matches,
        config.alert_channel,
        config.alerts_enabled,
        config.slack_webhook_url,
    )
    if sent_ids:
        update_match_statuses(config.alert_matches_csv, sent_ids, "sent")
    return new_matches


def _criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    return FilterCriteria.build(
        types=args.type or (),
        priorities=args.priority or (),
        status=args.status,
        bookmarked=args.bookmarked,
        unread=args.unread,
        entity_query=args.entity,
        industry=args.industry,
        date_range=args.date_range,
        company_id=args.company,
        text_query=args.search,
    )


def run_timeline(config: AppConfig, criteria: FilterCriteria, flat: bool = False) -> None:
    snapshot = load_snapshot(config)
    ordered = filter_signals(snapshot.signals, snapshot.companies, criteria)
    print(
        f"Signals: {len(ordered)} of {len(snapshot.signals)} "
        f"(active filters: {active_filter_count(criteria)})"
    )

    if flat:
        for signal in ordered:
            _print_signal(snapshot, signal)
        return

    result = bucket_signals(ordered)
    if not result.groups:
        print("No signals to show.")
    for group in result.groups:
        print(f"== {group.label} ({len(group.signals)} signals)")
        for signal in group.signals:
            _print_signal(snapshot, signal)
    if result.unbucketed_count:
        print(f"Undated signals not shown: {result.unbucketed_count}")


def _print_signal(snapshot: Snapshot, signal: Signal) -> None:
    print(
        f"  [{signal.effective_priority}] "
        f"{snapshot.company_name(signal.company_id)} | "
        f"{signal.type} | {signal.title}"
    )


def run_stats(config: AppConfig, company_id: str | None = None) -> None:
    stats = compute_stats(load_snapshot(config), company_id)
    last = stats.last_signal_at.isoformat() if stats.last_signal_at else "n/a"
    print(
        f"companies={stats.company_count} signals={stats.signal_count} "
        f"unread={stats.unread_count} bookmarked={stats.bookmarked_count} "
        f"in_progress={stats.in_progress_count} "
        f"active_alerts={stats.active_alert_count} last_signal_at={last}"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="signal-intel")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("alerts", help="Evaluate alert rules against signals")

    timeline = subparsers.add_parser("timeline", help="Filter and group signals by day")
    timeline.add_argument("--type", action="append")
    timeline.add_argument("--priority", action="append")
    timeline.add_argument("--status", default="all")
    timeline.add_argument("--bookmarked", action="store_true")
    timeline.add_argument("--unread", action="store_true")
    timeline.add_argument("--entity", default="")
    timeline.add_argument("--industry", default="all")
    timeline.add_argument("--date-range", choices=DATE_RANGES, default="all")
    timeline.add_argument("--company", default=None)
    timeline.add_argument("--search", default="")
    timeline.add_argument("--flat", action="store_true")

    stats = subparsers.add_parser("stats", help="Print dashboard counters")
    stats.add_argument("--company", default=None)
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    config = load_config()
    configure_logging(config.log_level)

    if args.command == "alerts":
        run_alerts(config)
    elif args.command == "timeline":
        run_timeline(config, _criteria_from_args(args), flat=args.flat)
    elif args.command == "stats":
        run_stats(config, args.company)


if __name__ == "__main__":
    main()
