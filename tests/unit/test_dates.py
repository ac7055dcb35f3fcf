from datetime import date, datetime, timedelta, timezone

from signal_intel.models.schemas import Signal
from signal_intel.signals.dates import effective_date, parse_timestamp, utc_day_key


def _make_signal(published_at, created_at) -> Signal:
    return Signal(
        signal_id="s1",
        company_id="c1",
        type="news",
        title="Title",
        published_at=published_at,
        created_at=created_at,
    )


def test_parse_timestamp_accepts_common_formats() -> None:
    utc = timezone.utc
    assert parse_timestamp("2024-03-01") == datetime(2024, 3, 1, tzinfo=utc)
    assert parse_timestamp("2024-03-01T10:15:00Z") == datetime(2024, 3, 1, 10, 15, tzinfo=utc)
    assert parse_timestamp("Fri, 01 Mar 2024 10:15:00 GMT") == datetime(
        2024, 3, 1, 10, 15, tzinfo=utc
    )
    assert parse_timestamp(date(2024, 3, 1)) == datetime(2024, 3, 1, tzinfo=utc)


def test_parse_timestamp_converts_offsets_to_utc_and_assumes_utc_for_naive() -> None:
    parsed = parse_timestamp("2024-03-01T10:00:00+02:00")
    assert parsed == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
    assert parsed.utcoffset() == timedelta(0)

    naive = parse_timestamp(datetime(2024, 3, 1, 10, 0))
    assert naive == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


def test_parse_timestamp_returns_none_for_unusable_values() -> None:
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("   ") is None
    assert parse_timestamp("unknown") is None
    assert parse_timestamp(12345) is None


def test_parse_timestamp_rejects_strings_without_a_full_date() -> None:
    for partial in ("March", "3", "10:30", "Monday", "2023", "March 2023"):
        assert parse_timestamp(partial) is None, partial


def test_parse_timestamp_rejects_values_out_of_range_in_utc() -> None:
    assert parse_timestamp("0001-01-01T00:00:00+05:00") is None
    assert parse_timestamp("9999-12-31T23:00:00-05:00") is None
    assert parse_timestamp(
        datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=5)))
    ) is None


def test_effective_date_prefers_published_then_created() -> None:
    published = _make_signal("2024-03-02", "2024-03-05")
    fallback = _make_signal(None, "2024-03-05")
    bad_published = _make_signal("unknown", "2024-03-05")
    undated = _make_signal("unknown", "")

    assert effective_date(published) == datetime(2024, 3, 2, tzinfo=timezone.utc)
    assert effective_date(fallback) == datetime(2024, 3, 5, tzinfo=timezone.utc)
    assert effective_date(bad_published) == datetime(2024, 3, 5, tzinfo=timezone.utc)
    assert effective_date(undated) is None


def test_utc_day_key_uses_utc_calendar_day() -> None:
    moment = parse_timestamp("2024-02-29T19:30:00-05:00")
    assert moment is not None
    assert utc_day_key(moment) == "2024-03-01"
