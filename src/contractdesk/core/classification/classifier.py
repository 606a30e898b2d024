"""
Contract type classification.

Base scoring: for every rule, score = matched keywords / keyword count +
boost. The highest score wins, ties going to the rule declared first. When no
score beats the baseline the contract is Recurring at the baseline
confidence.

Override rules then run in a fixed order, each able to force the type and
raise the confidence to a floor. A later rule overrides an earlier one:

(a) cab_markers        - CAB/memorandum markers in filename or body -> LOI
(b) amended_restated   - "amended and restated" + service delivery terms -> Recurring
(c) pricing_table      - at least two ``Year N: $X`` rows -> Recurring
"""

import re
from functools import lru_cache
from pathlib import Path
from typing import List, Tuple

from loguru import logger

from contractdesk.core.config import ContractTypeRule, PipelineConfig
from contractdesk.core.fields.money import pricing_rows
from contractdesk.domain.value_objects import ContractType
from contractdesk.models.classification import ContractClassification


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern:
    return re.compile(rf"(?<![A-Za-z0-9]){re.escape(keyword)}(?![A-Za-z0-9])", re.IGNORECASE)


def normalize_filename(file_name: str) -> str:
    """'Acme_CAB-Memorandum.v2.pdf' -> 'acme cab memorandum v2'"""
    return " ".join(re.sub(r"[_\-.]+", " ", Path(file_name).stem).lower().split())


def _score(rule: ContractTypeRule, haystack: str) -> Tuple[float, int]:
    matched = sum(1 for keyword in rule.keywords if _keyword_pattern(keyword).search(haystack))
    if not rule.keywords:
        return rule.confidence_boost, 0
    return matched / len(rule.keywords) + rule.confidence_boost, matched


class ContractClassifier:
    """Assigns Recurring / LOI / Amendment from keyword evidence. Pure and deterministic."""

    def __init__(self, config: PipelineConfig):
        self.config = config

    def classify(self, text: str, file_name: str = "") -> ContractClassification:
        config = self.config
        filename_words = normalize_filename(file_name)
        haystack = f"{filename_words}\n{text}"

        contract_type = config.baseline_type
        confidence = config.baseline_confidence
        exclude_monetary = False
        best_score = config.baseline_confidence
        matched_total = 0

        for rule in config.type_rules:
            score, matched = _score(rule, haystack)
            matched_total += matched
            if matched and score > best_score:
                contract_type, confidence, best_score = rule.type, score, score
                exclude_monetary = rule.exclude_monetary

        applied: List[str] = []
        overrides = config.overrides
        lowered = text.lower()

        if any(m in filename_words.split() for m in overrides.cab_filename_markers) or any(
            m in lowered for m in overrides.cab_body_markers
        ):
            contract_type = ContractType.LOI
            exclude_monetary = True
            confidence = max(confidence, overrides.cab_confidence_floor)
            applied.append("cab_markers")

        if any(m in lowered for m in overrides.restated_markers) and any(
            _keyword_pattern(term).search(text) for term in overrides.service_delivery_terms
        ):
            contract_type = ContractType.RECURRING
            exclude_monetary = False
            confidence = max(confidence, overrides.restated_confidence_floor)
            applied.append("amended_restated")

        if len(pricing_rows(text)) >= overrides.pricing_table_min_rows:
            contract_type = ContractType.RECURRING
            exclude_monetary = False
            confidence = max(confidence, overrides.pricing_table_confidence_floor)
            applied.append("pricing_table")

        classification = ContractClassification(
            type=contract_type,
            confidence=round(min(confidence, 1.0), 4),
            exclude_monetary=exclude_monetary,
            matched_keyword_count=matched_total,
            applied_overrides=applied,
        )
        logger.info(
            f"Classified {file_name or 'document'} as {classification.type} "
            f"(confidence={classification.confidence}, overrides={applied or 'none'})"
        )
        return classification
