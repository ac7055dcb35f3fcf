from __future__ import annotations

import requests

from signal_intel.models.schemas import AlertMatch


def _format_match(match: AlertMatch) -> str:
    return (
        f"[{match.rule_name}] {match.company_name} | "
        f"{match.trigger_type} | {match.signal_title}"
    )


def dispatch_matches(
    matches: list[AlertMatch],
    channel: str,
    enabled: bool,
    slack_webhook_url: str,
) -> set[str]:
    """Print matched alerts and optionally post them to a Slack webhook."""
    if not matches:
        print("No alert matches.")
        return set()

    print(f"Alert matches: {len(matches)}")
    for match in matches:
        print(
            "ALERT | "
            f"{match.rule_name} | "
            f"{match.company_name} | "
            f"{match.trigger_type} | "
            f"{match.signal_id} | "
            f"{match.signal_title}"
        )

    if not enabled:
        print("Dispatch disabled. Set ALERTS_ENABLED=true to enable.")
        return set()

    if channel != "slack":
        return set()

    if not slack_webhook_url:
        print("Slack webhook URL not set. Skipping dispatch.")
        return set()

    sent_ids: set[str] = set()
    for match in matches:
        try:
            response = requests.post(
                slack_webhook_url,
                json={"text": _format_match(match)},
                timeout=5,
            )
        except requests.RequestException as exc:
            print(f"Slack send failed: {exc}")
            continue

        if not 200 <= response.status_code < 300:
            print(f"Slack send failed: status {response.status_code}")
            continue

        sent_ids.add(match.match_id)

    return sent_ids
