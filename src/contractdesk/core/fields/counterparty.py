"""
Counterparty (external contracting party) extraction.

Seven strategies, most explicit first:
1. definitional      - Acme Corp ("Customer")
2. account_label     - Account Name: Acme Corp
3. customer_alias    - "Customer" or "Acme"
4. appointment       - Advisory Board Appointment – Acme Corp
5. cab_filename      - Acme CAB Memorandum.pdf
6. between_parties   - between <internal> and Acme Corp
7. title_line        - Acme Corp – Master Services Agreement
"""

import re
from pathlib import Path
from typing import Iterable, List, Optional

from contractdesk.core.config import PipelineConfig
from contractdesk.models.fields import FieldValue
from contractdesk.utils.company_names import normalize_company_name
from contractdesk.utils.fallback import Strategy, first_success

NAME = r"(?P<name>(?:(?:[A-Z0-9][\w&'.\-]*|&|of|the|de)\s+){0,6}[A-Z0-9][\w&'.\-]*(?:,\s*(?:Inc|LLC|Ltd|Corp|Co|GmbH|PLC|LLP)\.?)?)"
QUOTE = r"[\"“”']"

DEFINITIONAL_RE = re.compile(
    NAME + r"\s*\(\s*(?:the\s+)?" + QUOTE + r"?(?:Customer|Client|Licensee|Subscriber)" + QUOTE + r"?\s*\)"
)
ACCOUNT_LABEL_RE = re.compile(r"(?im)^\s*(?:Customer\s+|Client\s+)?Account\s+Name\s*:\s*(?P<name>[^\n]+?)\s*$")
CUSTOMER_ALIAS_RE = re.compile(QUOTE + r"Customer" + QUOTE + r"\s+or\s+" + QUOTE + r"(?P<name>[^\"“”'\n]{2,80})" + QUOTE)
APPOINTMENT_RE = re.compile(r"\bAppointment\s*[–—\-:]\s*(?P<name>[^\n]{2,80}?)\s*$", re.MULTILINE)
BETWEEN_RE = re.compile(
    r"\b[Bb]etween\s+(?P<first>[^\n]{2,120}?)\s*(?:\([^)]*\))?,?\s+and\s+" + NAME.replace("?P<name>", "?P<second>"),
)
TITLE_SPLIT_RE = re.compile(
    r"\s*(?:[–—\-|:]\s*)?\b(?:Master\s+Services?\s+Agreement|Master\s+Subscription\s+Agreement|Order\s+Form|"
    r"Service\s+Order|Statement\s+of\s+Work|CAB\s+Memorandum|Memorandum|Agreement|Contract|Amendment|Addendum|"
    r"Letter\s+of\s+Intent)\b.*$",
    re.IGNORECASE,
)
FILENAME_NOISE_RE = re.compile(
    r"\b(?:cab|memorandum|customer|advisory|board|signed|executed|final|draft|loi|copy|v\d+|\d+)\b",
    re.IGNORECASE,
)

GENERIC_PHRASES = {
    "customer", "the customer", "client", "the client", "company", "the company",
    "party", "parties", "the parties", "licensee", "subscriber", "you", "the undersigned",
    "vendor", "provider", "supplier", "agreement", "this agreement", "customer advisory board",
}
MAX_NAME_LENGTH = 80


def reject_reason(candidate: str, config: PipelineConfig) -> Optional[str]:
    """Why ``candidate`` cannot be the counterparty, or None."""
    lowered = candidate.strip().lower()
    if len(lowered) < 2 or len(lowered) > MAX_NAME_LENGTH:
        return "implausible length"
    if lowered in GENERIC_PHRASES:
        return "generic phrase"
    if config.is_internal_company(candidate):
        return "internal company"
    return None


def _first_acceptable(candidates: Iterable[str], config: PipelineConfig) -> Optional[str]:
    for candidate in candidates:
        cleaned = normalize_company_name(candidate)
        if cleaned and reject_reason(cleaned, config) is None:
            return cleaned
    return None


def _definitional(text: str, file_name: str, config: PipelineConfig) -> Optional[str]:
    return _first_acceptable((m.group("name") for m in DEFINITIONAL_RE.finditer(text)), config)


def _account_label(text: str, file_name: str, config: PipelineConfig) -> Optional[str]:
    return _first_acceptable((m.group("name") for m in ACCOUNT_LABEL_RE.finditer(text)), config)


def _customer_alias(text: str, file_name: str, config: PipelineConfig) -> Optional[str]:
    return _first_acceptable((m.group("name") for m in CUSTOMER_ALIAS_RE.finditer(text)), config)


def _appointment(text: str, file_name: str, config: PipelineConfig) -> Optional[str]:
    return _first_acceptable((m.group("name") for m in APPOINTMENT_RE.finditer(text)), config)


def _cab_filename(text: str, file_name: str, config: PipelineConfig) -> Optional[str]:
    stem = re.sub(r"[_\-.]+", " ", Path(file_name).stem)
    words = stem.lower().split()
    if not any(marker in words for marker in config.overrides.cab_filename_markers):
        return None
    remainder = " ".join(FILENAME_NOISE_RE.sub(" ", stem).split())
    return _first_acceptable([remainder], config) if remainder else None


def _between_parties(text: str, file_name: str, config: PipelineConfig) -> Optional[str]:
    candidates: List[str] = []
    for match in BETWEEN_RE.finditer(text):
        candidates.extend([match.group("second"), match.group("first")])
    return _first_acceptable(candidates, config)


def _title_line(text: str, file_name: str, config: PipelineConfig) -> Optional[str]:
    lines = [line.strip() for line in text.splitlines() if line.strip()][:5]
    candidates = []
    for line in lines:
        if not TITLE_SPLIT_RE.search(line):
            continue
        head = TITLE_SPLIT_RE.sub("", line).strip(" -–—|:")
        if head and head[0].isupper():
            candidates.append(head)
    return _first_acceptable(candidates, config)


COUNTERPARTY_STRATEGIES: List[Strategy[str]] = [
    Strategy("definitional", _definitional),
    Strategy("account_label", _account_label),
    Strategy("customer_alias", _customer_alias),
    Strategy("appointment", _appointment),
    Strategy("cab_filename", _cab_filename),
    Strategy("between_parties", _between_parties),
    Strategy("title_line", _title_line),
]

STRATEGY_CONFIDENCE = {
    "definitional": 0.9,
    "account_label": 0.9,
    "customer_alias": 0.85,
    "appointment": 0.8,
    "cab_filename": 0.7,
    "between_parties": 0.7,
    "title_line": 0.6,
}


def extract_counterparty(text: str, file_name: str, config: PipelineConfig) -> Optional[FieldValue[str]]:
    result = first_success(
        COUNTERPARTY_STRATEGIES,
        text,
        file_name,
        config,
        accept=lambda name: reject_reason(name, config),
        label="counterparty",
    )
    if result.is_err():
        return None
    success = result.unwrap()
    return FieldValue(success.value, STRATEGY_CONFIDENCE[success.name], success.name)
