from __future__ import annotations

from collections.abc import Iterable

from signal_intel.models.schemas import AlertRule, Company, Signal

ANY_SIGNAL = "any_signal"
CUSTOM_KEYWORD = "custom_keyword"


def searchable_text(signal: Signal) -> str:
    """Title and body, concatenated as-is."""
    return f"{signal.title or ''}{signal.body or ''}"


def _keywords_match(keywords: Iterable[str], haystack: str) -> bool:
    # Whitespace-only keywords are inert; others are matched verbatim.
    for keyword in keywords:
        needle = str(keyword)
        if needle.strip() and needle.lower() in haystack:
            return True
    return False


def matches(rule: AlertRule, signal: Signal, company: Company | None = None) -> bool:
    """Whether ``rule`` fires for ``signal``.

    ``company`` is the signal's resolved company. A company-scoped rule never
    fires for a signal whose company could not be resolved; company-agnostic
    rules still do.
    """
    if not rule.is_active:
        return False
    if rule.company_id is not None:
        if company is None or rule.company_id != signal.company_id:
            return False

    if rule.trigger_type == ANY_SIGNAL:
        return True
    if rule.trigger_type == CUSTOM_KEYWORD:
        return _keywords_match(rule.keywords or [], searchable_text(signal).lower())
    return signal.type == rule.trigger_type


def evaluate(
    rules: Iterable[AlertRule],
    signal: Signal,
    company: Company | None = None,
) -> list[AlertRule]:
    return [rule for rule in rules if matches(rule, signal, company)]


def match_triggers(text: str, rules: list[AlertRule]) -> list[AlertRule]:
    """Keyword rules whose keywords occur in arbitrary ``text``."""
    haystack = text.lower()
    matched: list[AlertRule] = []
    for rule in rules:
        if rule.trigger_type != CUSTOM_KEYWORD or not rule.is_active:
            continue
        if _keywords_match(rule.keywords or [], haystack):
            matched.append(rule)
    return matched
