"""Confidence scoring and the required-field gate"""

from contractdesk.core.validation.gate import ValidationGate
from contractdesk.core.validation.scorer import plausibility_cap, score_fields

__all__ = ["ValidationGate", "plausibility_cap", "score_fields"]
