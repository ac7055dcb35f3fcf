import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

_LOGGING_CONFIGURED = False
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class AppConfig:
    companies_csv: Path = Path("data/companies.csv")
    signals_csv: Path = Path("data/signals.csv")
    alert_rules_csv: Path = Path("data/alert_rules.csv")
    alert_matches_csv: Path = Path("data/alert_matches.csv")
    alerts_enabled: bool = False
    alert_channel: str = "dashboard"
    slack_webhook_url: str = ""
    backfill_enabled: bool = False
    log_level: str = "WARNING"


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(name)
    if not value:
        return default
    return Path(value)


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default

    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False

    logger.warning("Invalid boolean value for %s: %s", name, value)
    return default


def _env_log_level(name: str, default: str) -> str:
    value = os.getenv(name)
    if not value:
        return default
    normalized = value.strip().upper()
    if normalized not in _LOG_LEVELS:
        logger.warning("Invalid log level for %s: %s", name, value)
        return default
    return normalized


def load_config() -> AppConfig:
    """Load configuration from defaults and optional .env overrides."""
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)

    defaults = AppConfig()

    return AppConfig(
        companies_csv=_env_path("COMPANIES_CSV", defaults.companies_csv),
        signals_csv=_env_path("SIGNALS_CSV", defaults.signals_csv),
        alert_rules_csv=_env_path("ALERT_RULES_CSV", defaults.alert_rules_csv),
        alert_matches_csv=_env_path(
            "ALERT_MATCHES_CSV", defaults.alert_matches_csv
        ),
        alerts_enabled=_env_bool("ALERTS_ENABLED", defaults.alerts_enabled),
        alert_channel=_env_str("ALERT_CHANNEL", defaults.alert_channel),
        slack_webhook_url=_env_str(
            "SLACK_WEBHOOK_URL", defaults.slack_webhook_url
        ),
        backfill_enabled=_env_bool(
            "BACKFILL_ENABLED", defaults.backfill_enabled
        ),
        log_level=_env_log_level("LOG_LEVEL", defaults.log_level),
    )


def configure_logging(level: str = "WARNING") -> None:
    """Configure the root logger once; later calls are no-ops."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _LOGGING_CONFIGURED = True
