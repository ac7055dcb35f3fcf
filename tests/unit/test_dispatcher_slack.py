import requests

from signal_intel.alerts import dispatcher
from signal_intel.models.schemas import AlertMatch


def _make_match(match_id: str) -> AlertMatch:
    return AlertMatch(
        match_id=match_id,
        rule_id="r001",
        rule_name="All Funding Announcements",
        signal_id="s001",
        signal_title="Acme Robotics raises $40M",
        company_id="c001",
        company_name="Acme Robotics",
        trigger_type="funding_announcement",
        notification_channel="slack",
        dedupe_key="r001|s001",
        created_at="2024-03-01T12:00:00Z",
        status="new",
    )


def _fake_post(calls: list, status_code: int = 200):
    def fake_post(url, json, timeout):
        calls.append((url, json, timeout))

        class Response:
            pass

        response = Response()
        response.status_code = status_code
        return response

    return fake_post


def test_dispatch_slack_sends_when_enabled(monkeypatch) -> None:
    matches = [_make_match("m001"), _make_match("m002")]
    calls: list[tuple[str, dict, int]] = []
    monkeypatch.setattr(dispatcher.requests, "post", _fake_post(calls))

    sent_ids = dispatcher.dispatch_matches(
        matches,
        channel="slack",
        enabled=True,
        slack_webhook_url="https://hooks.slack.com/services/T000/B000/XXX",
    )

    assert len(calls) == 2
    assert calls[0][1]["text"].startswith("[All Funding Announcements] Acme Robotics")
    assert sent_ids == {"m001", "m002"}


def test_dispatch_slack_skips_when_disabled(monkeypatch, capsys) -> None:
    calls: list[tuple[str, dict, int]] = []
    monkeypatch.setattr(dispatcher.requests, "post", _fake_post(calls))

    sent_ids = dispatcher.dispatch_matches(
        [_make_match("m003")],
        channel="slack",
        enabled=False,
        slack_webhook_url="https://hooks.slack.com/services/T000/B000/XXX",
    )

    assert calls == []
    assert sent_ids == set()
    assert "Dispatch disabled" in capsys.readouterr().out


def test_dispatch_slack_skips_failed_sends(monkeypatch) -> None:
    def failing_post(url, json, timeout):
        raise requests.ConnectionError("boom")

    monkeypatch.setattr(dispatcher.requests, "post", failing_post)
    failed = dispatcher.dispatch_matches(
        [_make_match("m004")],
        channel="slack",
        enabled=True,
        slack_webhook_url="https://hooks.slack.com/services/T000/B000/XXX",
    )

    calls: list[tuple[str, dict, int]] = []
    monkeypatch.setattr(dispatcher.requests, "post", _fake_post(calls, status_code=500))
    rejected = dispatcher.dispatch_matches(
        [_make_match("m005")],
        channel="slack",
        enabled=True,
        slack_webhook_url="https://hooks.slack.com/services/T000/B000/XXX",
    )

    assert failed == set()
    assert rejected == set()
    assert len(calls) == 1


def test_dispatch_with_no_matches(capsys) -> None:
    sent_ids = dispatcher.dispatch_matches([], "slack", True, "https://example.com")

    assert sent_ids == set()
    assert "No alert matches." in capsys.readouterr().out
