"""Contract term (months) extraction."""

import re
from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from contractdesk.core.config import PipelineConfig
from contractdesk.domain.value_objects import ContractType
from contractdesk.models.fields import FieldValue
from contractdesk.utils.fallback import Strategy, first_success

NUMBER_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6, "seven": 7,
    "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12, "eighteen": 18,
    "twenty-four": 24, "thirty-six": 36, "forty-eight": 48, "sixty": 60,
}
QUANTITY = (
    r"(?:(?P<word>" + "|".join(sorted(NUMBER_WORDS, key=len, reverse=True)) + r")"
    r"(?:\s*\(\s*(?P<paren>\d{1,3})\s*\))?|(?P<num>\d{1,3}))"
    r"[\s-]*(?P<unit>months?|years?)\b"
)
TERM_QUANTITY_RE = re.compile(r"\bterm\b[^.\n]{0,60}?\b" + QUANTITY, re.IGNORECASE)
ANY_QUANTITY_RE = re.compile(r"\b" + QUANTITY, re.IGNORECASE)
ANNIVERSARY_RE = re.compile(r"\b(?P<ordinal>first|second|third|fourth|fifth)\s+anniversary\b", re.IGNORECASE)
ANNIVERSARIES = {"first": 12, "second": 24, "third": 36, "fourth": 48, "fifth": 60}
STANDARD_TERMS = (12, 24, 36, 48, 60)


def _months(match: re.Match) -> int:
    if match.group("num"):
        count = int(match.group("num"))
    elif match.group("paren"):
        count = int(match.group("paren"))
    else:
        count = NUMBER_WORDS[match.group("word").lower()]
    return count * 12 if match.group("unit").lower().startswith("year") else count


def _explicit(pattern: re.Pattern, confidence: float, source: str):
    def run(text: str, *_) -> Optional[FieldValue[int]]:
        match = pattern.search(text)
        return FieldValue(_months(match), confidence, source) if match else None
    return run


def _anniversary(text: str, *_) -> Optional[FieldValue[int]]:
    match = ANNIVERSARY_RE.search(text)
    if not match:
        return None
    return FieldValue(ANNIVERSARIES[match.group("ordinal").lower()], 0.75, "anniversary")


def months_between(start: date, end: date) -> int:
    """Whole months covered by an inclusive [start, end] period, snapped to standard terms."""
    delta = relativedelta(end + timedelta(days=1), start)
    months = delta.years * 12 + delta.months + (1 if delta.days >= 15 else 0)
    for standard in STANDARD_TERMS:
        if abs(months - standard) <= 1:
            return standard
    return months


def term_from_dates(start: Optional[date], end: Optional[date]) -> Optional[FieldValue[int]]:
    if start is None or end is None or end <= start:
        return None
    return FieldValue(months_between(start, end), 0.7, "explicit_dates")


def extract_term(
    text: str,
    contract_type: ContractType,
    config: PipelineConfig,
    explicit_start: Optional[date] = None,
    explicit_end: Optional[date] = None,
) -> Optional[FieldValue[int]]:
    """
    Term in months.

    Explicit "N months/years" phrasing wins, then anniversary phrasing, then
    the span between explicitly labelled start and end dates. LOI agreements
    fall back to the configured default.
    """
    strategies = [
        Strategy("term_phrase", _explicit(TERM_QUANTITY_RE, 0.9, "term_phrase")),
        Strategy("duration_phrase", _explicit(ANY_QUANTITY_RE, 0.75, "duration_phrase")),
        Strategy("anniversary", _anniversary),
        Strategy("explicit_dates", lambda *_: term_from_dates(explicit_start, explicit_end)),
        Strategy(
            "loi_default",
            lambda *_: FieldValue(config.loi_default_term_months, 0.6, "loi_default")
            if contract_type == ContractType.LOI else None,
        ),
    ]
    result = first_success(strategies, text, accept=lambda v: None if v.value > 0 else "non-positive term", label="term")
    return result.unwrap().value if result.is_ok() else None


def derive_end_date(start: date, term_months: int) -> date:
    """start + term - 1 day, using calendar month arithmetic."""
    return start + relativedelta(months=term_months) - timedelta(days=1)
