from pathlib import Path

from signal_intel.storage.csv_store import parse_bool, parse_json, parse_list
from signal_intel.storage.snapshot import load_alert_rules, load_companies, load_signals


def _write_csv(path: Path, header: str, rows: list[str]) -> None:
    path.write_text(header + "\n" + "\n".join(rows) + "\n", encoding="utf-8")


def test_cell_parsers() -> None:
    assert parse_bool("Yes", False) is True
    assert parse_bool("off", True) is False
    assert parse_bool("", True) is True
    assert parse_bool("maybe", False) is False
    assert parse_list(" layoff ; ;restructuring") == ["layoff", "restructuring"]
    assert parse_list(None) == []
    assert parse_json('{"people": ["Jane"]}') == {"people": ["Jane"]}
    assert parse_json("{broken") is None
    assert parse_json("") is None


def test_load_signals_parses_entities_and_flags(tmp_path: Path) -> None:
    path = tmp_path / "signals.csv"
    _write_csv(
        path,
        "signal_id,company_id,type,title,body,priority,entities,published_at,"
        "created_at,is_read,is_bookmarked,content_status,notes,summary",
        [
            's1,c1,funding,Acme raises,Body,,"{""organizations"": [{""name"": ""Sequoia""}]}",'
            "2024-03-01,2024-03-02T10:00:00Z,true,false,,,",
            "s2,c1,news,Broken,,high,{not json,,2024-03-02T10:00:00Z,,,reviewing,Check,",
        ],
    )

    signals = load_signals(path)

    assert [signal.signal_id for signal in signals] == ["s1", "s2"]
    assert signals[0].priority is None
    assert signals[0].effective_priority == "medium"
    assert signals[0].entities == {"organizations": [{"name": "Sequoia"}]}
    assert signals[0].is_read is True
    assert signals[0].content_status == "new"
    assert signals[1].entities is None
    assert signals[1].published_at is None
    assert signals[1].content_status == "reviewing"


def test_load_companies_and_rules(tmp_path: Path) -> None:
    companies_csv = tmp_path / "companies.csv"
    rules_csv = tmp_path / "alert_rules.csv"
    _write_csv(
        companies_csv,
        "company_id,name,industry,founded_year,is_active",
        ["c1,Acme,Robotics,2015,true", "c2,Globex,Energy,n/a,false"],
    )
    _write_csv(
        rules_csv,
        "rule_id,name,trigger_type,company_id,keywords,notification_channel,is_active",
        [
            "r1,Layoffs,custom_keyword,,layoff;restructuring,slack,true",
            "r2,Acme funding,funding_announcement,c1,,,",
        ],
    )

    companies = load_companies(companies_csv)
    rules = load_alert_rules(rules_csv)

    assert companies[0].founded_year == 2015
    assert companies[1].founded_year is None
    assert companies[1].is_active is False
    assert rules[0].company_id is None
    assert rules[0].keywords == ["layoff", "restructuring"]
    assert rules[1].company_id == "c1"
    assert rules[1].notification_channel == "dashboard"
    assert rules[1].is_active is True


def test_missing_files_load_as_empty(tmp_path: Path) -> None:
    assert load_signals(tmp_path / "missing.csv") == []
