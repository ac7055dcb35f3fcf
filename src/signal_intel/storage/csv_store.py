import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def read_csv(path: Path) -> List[Dict[str, str]]:
    if not path.exists():
        return []
    with path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        return list(reader)


def write_csv(
    path: Path,
    rows: Iterable[Dict[str, Any]],
    fieldnames: List[str],
    append: bool = False,
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = "a" if append else "w"
    with path.open(mode, newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        if not append or path.stat().st_size == 0:
            writer.writeheader()
        for row in rows:
            writer.writerow(row)


def parse_bool(value: str | None, default: bool) -> bool:
    if not value:
        return default

    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False

    return default


def parse_list(value: str | None) -> List[str]:
    """Split a ``;``-separated cell, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(";") if item.strip()]


def parse_json(value: str | None) -> Any:
    if not value or not value.strip():
        return None
    try:
        return json.loads(value)
    except ValueError:
        logger.warning("Invalid JSON cell ignored: %.60s", value)
        return None


def parse_int(value: str | None) -> int | None:
    if not value or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None
