"""
Confidence scoring.

Each populated field keeps min(extractor confidence, plausibility cap).
Caps only exist for fields with a plausibility rule; other fields keep the
extractor's own confidence.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from contractdesk.core.config import PipelineConfig
from contractdesk.models.fields import MONETARY_FIELDS, FieldValue

DATE_FIELDS = ("start_date", "end_date", "signature_date")

PLAUSIBLE_CAP = 0.9
IMPLAUSIBLE_CAP = 0.5
MONEY_CAP = 0.85
COUNTERPARTY_CAP = 0.8


def plausibility_cap(field: str, value: Any, config: PipelineConfig) -> Tuple[float, Optional[str]]:
    """(cap, warning) for one field value."""
    if field == "term_months":
        low, high = config.plausible_term_range
        if low <= value <= high:
            return PLAUSIBLE_CAP, None
        return IMPLAUSIBLE_CAP, f"Term of {value} months is outside the plausible range {low}-{high}"
    if field in DATE_FIELDS and isinstance(value, date):
        low, high = config.plausible_year_range
        return (PLAUSIBLE_CAP if low <= value.year <= high else IMPLAUSIBLE_CAP), None
    if field in MONETARY_FIELDS:
        return (MONEY_CAP if value > 0 else IMPLAUSIBLE_CAP), None
    if field == "counterparty_name":
        return COUNTERPARTY_CAP, None
    return 1.0, None


def score_fields(values: Dict[str, FieldValue], config: PipelineConfig) -> Tuple[Dict[str, float], List[str]]:
    """
    Build the confidence map and plausibility warnings for ``values``.

    Args:
        values: Populated field values keyed by field name
        config: Pipeline configuration with plausibility ranges

    Returns:
        Tuple of confidence map (populated entries only) and warnings
    """
    confidence: Dict[str, float] = {}
    warnings: List[str] = []
    for field, field_value in values.items():
        if field_value is None or field_value.value is None:
            continue
        cap, warning = plausibility_cap(field, field_value.value, config)
        confidence[field] = round(max(0.0, min(field_value.confidence, cap)), 4)
        if warning:
            warnings.append(warning)

    if "counterparty_name" not in confidence:
        warnings.append("Counterparty could not be identified from the document")
    return confidence, warnings
