"""
Monetary value extraction.

Order of precedence:
1. multi-year pricing table (``Year N: $X`` rows, first occurrence per year)
2. labelled total / annual / monthly amounts
3. total and annual derived from each other through the term
4. monthly derived from annual
"""

import re
from typing import Dict, Optional

from contractdesk.core.config import PipelineConfig
from contractdesk.models.fields import FieldValue
from contractdesk.utils.fallback import Strategy, first_success

AMOUNT = r"\$\s*(?P<amount>\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)(?:\s*(?P<scale>million|mm|m|k)\b)?"

PRICING_ROW_RE = re.compile(
    r"\bYear\s+(?P<year>\d{1,2})\s*[:\-–—]\s*" + AMOUNT,
    re.IGNORECASE,
)

TOTAL_PATTERNS = (
    re.compile(
        r"\b(?:total\s+contract\s+value|total\s+(?:fees|value|amount|price|commitment)|"
        r"aggregate\s+(?:fees|amount)|TCV)\b[^$\n]{0,40}?" + AMOUNT,
        re.IGNORECASE,
    ),
    re.compile(r"\bnot\s+to\s+exceed\s+" + AMOUNT, re.IGNORECASE),
)
ANNUAL_PATTERNS = (
    re.compile(
        r"\b(?:annual(?:ized)?\s+(?:subscription\s+)?(?:fees?|value|amount|price|contract\s+value)|ACV)\b[^$\n]{0,40}?" + AMOUNT,
        re.IGNORECASE,
    ),
    re.compile(AMOUNT + r"\s*(?:USD\s*)?(?:per\s+(?:year|annum)|annually|/\s*(?:yr|year))\b", re.IGNORECASE),
)
MONTHLY_PATTERNS = (
    re.compile(r"\bmonthly\s+(?:subscription\s+)?(?:fees?|amount|payment|price)\b[^$\n]{0,40}?" + AMOUNT, re.IGNORECASE),
    re.compile(AMOUNT + r"\s*(?:USD\s*)?(?:per\s+month|monthly|/\s*(?:mo|month))\b", re.IGNORECASE),
)

SCALES = {"million": 1_000_000, "mm": 1_000_000, "m": 1_000_000, "k": 1_000}


def to_cents(value: float) -> float:
    return round(value, 2)


def parse_amount(match: re.Match) -> float:
    value = float(match.group("amount").replace(",", ""))
    scale = (match.group("scale") or "").lower()
    return value * SCALES.get(scale, 1)


def pricing_rows(text: str) -> Dict[int, float]:
    """Year number to amount, keeping the first occurrence of each year."""
    rows: Dict[int, float] = {}
    for match in PRICING_ROW_RE.finditer(text):
        year = int(match.group("year"))
        if year not in rows:
            rows[year] = parse_amount(match)
    return rows


def _labelled(patterns, text: str, source: str) -> Optional[FieldValue[float]]:
    strategies = [
        Strategy(f"{source}_{i}", lambda t, p=pattern: p.search(t))
        for i, pattern in enumerate(patterns, start=1)
    ]
    result = first_success(strategies, text, accept=lambda m: None if parse_amount(m) > 0 else "zero amount")
    if result.is_err():
        return None
    success = result.unwrap()
    return FieldValue(to_cents(parse_amount(success.value)), 0.8, success.name)


def extract_money(
    text: str,
    term_months: Optional[int],
    config: PipelineConfig,
) -> Dict[str, FieldValue[float]]:
    """
    Extract total, annual and monthly values.

    Returns only the populated entries, keyed by field name.
    """
    values: Dict[str, FieldValue[float]] = {}

    rows = pricing_rows(text)
    if len(rows) >= config.overrides.pricing_table_min_rows:
        total = sum(rows.values())
        values["total_contract_value"] = FieldValue(to_cents(total), 0.85, "pricing_table")
        years = term_months / 12 if term_months else len(rows)
        values["annual_contract_value"] = FieldValue(to_cents(total / years), 0.8, "pricing_table")
    else:
        total_value = _labelled(TOTAL_PATTERNS, text, "labelled_total")
        annual_value = _labelled(ANNUAL_PATTERNS, text, "labelled_annual")
        monthly_value = _labelled(MONTHLY_PATTERNS, text, "labelled_monthly")
        if total_value:
            values["total_contract_value"] = total_value
        if annual_value:
            values["annual_contract_value"] = annual_value
        if monthly_value:
            values["monthly_amount"] = monthly_value

    if term_months:
        years = term_months / 12
        total_value = values.get("total_contract_value")
        annual_value = values.get("annual_contract_value")
        if total_value and not annual_value:
            values["annual_contract_value"] = FieldValue(to_cents(total_value.value / years), 0.7, "derived_from_total")
        elif annual_value and not total_value:
            values["total_contract_value"] = FieldValue(to_cents(annual_value.value * years), 0.7, "derived_from_annual")

    annual_value = values.get("annual_contract_value")
    if annual_value and "monthly_amount" not in values:
        values["monthly_amount"] = FieldValue(to_cents(annual_value.value / 12), 0.7, "derived_from_annual")

    if "annual_contract_value" not in values and "monthly_amount" in values:
        monthly = values["monthly_amount"].value
        values["annual_contract_value"] = FieldValue(to_cents(monthly * 12), 0.65, "derived_from_monthly")
        if term_months and "total_contract_value" not in values:
            values["total_contract_value"] = FieldValue(to_cents(monthly * term_months), 0.65, "derived_from_monthly")

    return values
