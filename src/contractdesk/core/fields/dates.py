"""
Date extraction.

Recognized formats: MM/DD/YYYY, MM/DD/YY, Month D, YYYY, D Month YYYY and
ISO YYYY-MM-DD. Years outside the configured window are discarded.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from contractdesk.core.config import PipelineConfig
from contractdesk.models.fields import FieldValue
from contractdesk.utils.fallback import Strategy, first_success

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
MONTH_NAME = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|"
    r"Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?"
)
ORDINAL = r"(?:st|nd|rd|th)?"

DATE_PATTERNS = (
    re.compile(r"\b(?P<y>\d{4})-(?P<m>\d{1,2})-(?P<d>\d{1,2})\b"),
    re.compile(r"\b(?P<m>\d{1,2})/(?P<d>\d{1,2})/(?P<y>\d{4}|\d{2})\b"),
    re.compile(rf"\b(?P<mon>{MONTH_NAME})\s+(?P<d>\d{{1,2}}){ORDINAL},?\s+(?P<y>\d{{4}})\b", re.IGNORECASE),
    re.compile(rf"\b(?P<d>\d{{1,2}}){ORDINAL}\s+(?:day\s+of\s+)?(?P<mon>{MONTH_NAME}),?\s+(?P<y>\d{{4}})\b", re.IGNORECASE),
)

START_LABEL_RE = re.compile(
    r"\b(?:effective\s+date|start\s+date|commencement\s+date|effective\s+as\s+of|effective\s+on|"
    r"dated(?:\s+as\s+of)?|commenc\w*\s+on|beginning\s+on|starting\s+on)\b",
    re.IGNORECASE,
)
END_LABEL_RE = re.compile(
    r"\b(?:end\s+date|expiration\s+date|expiry\s+date|termination\s+date|expires?\s+on|"
    r"terminates?\s+on|ending\s+on|until|through)\b",
    re.IGNORECASE,
)
LABEL_WINDOW = 40


@dataclass(frozen=True)
class DateMention:
    value: date
    start: int
    end: int


def _to_date(match: re.Match) -> Optional[date]:
    groups = match.groupdict()
    year = int(groups["y"])
    if year < 100:
        year += 2000
    if groups.get("mon"):
        month = MONTHS[groups["mon"][:3].lower()]
    else:
        month = int(groups["m"])
    try:
        return date(year, month, int(groups["d"]))
    except ValueError:
        return None


def find_dates(text: str, config: PipelineConfig) -> List[DateMention]:
    """All valid dates in ``text`` in reading order, overlapping matches removed."""
    low, high = config.date_year_window
    mentions: List[DateMention] = []
    for pattern in DATE_PATTERNS:
        for match in pattern.finditer(text):
            value = _to_date(match)
            if value is None or not low <= value.year <= high:
                continue
            if any(m.start < match.end() and match.start() < m.end for m in mentions):
                continue
            mentions.append(DateMention(value, match.start(), match.end()))
    return sorted(mentions, key=lambda m: m.start)


def _labelled(text: str, mentions: List[DateMention], label_re: re.Pattern) -> Optional[date]:
    for label in label_re.finditer(text):
        for mention in mentions:
            if label.end() <= mention.start <= label.end() + LABEL_WINDOW:
                return mention.value
    return None


def labelled_start_date(text: str, mentions: List[DateMention]) -> Optional[FieldValue[date]]:
    value = _labelled(text, mentions, START_LABEL_RE)
    return FieldValue(value, 0.9, "labelled_start") if value else None


def labelled_end_date(text: str, mentions: List[DateMention]) -> Optional[FieldValue[date]]:
    value = _labelled(text, mentions, END_LABEL_RE)
    return FieldValue(value, 0.85, "labelled_end") if value else None


def extract_start_date(text: str, mentions: List[DateMention]) -> Optional[FieldValue[date]]:
    """Labelled start date, else the earliest date in the document."""
    strategies = [
        Strategy("labelled_start", lambda: labelled_start_date(text, mentions)),
        Strategy("earliest_date", lambda: FieldValue(min(m.value for m in mentions), 0.6, "earliest_date") if mentions else None),
    ]
    result = first_success(strategies, label="start_date")
    return result.unwrap().value if result.is_ok() else None


def extract_signature_date(mentions: List[DateMention]) -> Optional[FieldValue[date]]:
    """The chronologically last date, which is usually the countersignature."""
    if not mentions:
        return None
    return FieldValue(max(m.value for m in mentions), 0.6, "latest_date")
