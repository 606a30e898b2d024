"""
Field extraction engine.

Runs every field extractor over the text once, enforces the monetary and
end-date invariants, then applies the confidence scorer. The resulting
ExtractedFieldSet is read-only.
"""

from typing import Dict, Optional

from loguru import logger

from contractdesk.core.config import PipelineConfig
from contractdesk.core.fields.counterparty import extract_counterparty
from contractdesk.core.fields.dates import (
    extract_signature_date,
    extract_start_date,
    find_dates,
    labelled_end_date,
    labelled_start_date,
)
from contractdesk.core.fields.money import extract_money
from contractdesk.core.fields.names import extract_display_name, loi_notes
from contractdesk.core.fields.products import extract_products
from contractdesk.core.fields.signatures import extract_signatures
from contractdesk.core.fields.term import derive_end_date, extract_term
from contractdesk.core.validation.scorer import score_fields
from contractdesk.models.classification import ContractClassification
from contractdesk.models.fields import MONETARY_FIELDS, ExtractedFieldSet, FieldValue


class FieldExtractionEngine:
    """Builds an ExtractedFieldSet from contract text."""

    def __init__(self, config: PipelineConfig):
        self.config = config

    def extract(
        self,
        text: str,
        classification: ContractClassification,
        file_name: str = "",
    ) -> ExtractedFieldSet:
        config = self.config
        values: Dict[str, Optional[FieldValue]] = {}

        mentions = find_dates(text, config)
        start = extract_start_date(text, mentions)
        explicit_start = labelled_start_date(text, mentions)
        explicit_end = labelled_end_date(text, mentions)
        term = extract_term(
            text,
            classification.type,
            config,
            explicit_start=explicit_start.value if explicit_start else None,
            explicit_end=explicit_end.value if explicit_end else None,
        )
        values["start_date"] = start
        values["term_months"] = term
        values["signature_date"] = extract_signature_date(mentions)

        end_date_derived = False
        if explicit_end:
            values["end_date"] = explicit_end
        elif start and term:
            values["end_date"] = FieldValue(
                derive_end_date(start.value, term.value),
                min(start.confidence, term.confidence),
                "derived_from_term",
            )
            end_date_derived = True

        if not classification.exclude_monetary:
            values.update(extract_money(text, term.value if term else None, config))

        values["counterparty_name"] = extract_counterparty(text, file_name, config)
        values.update(extract_signatures(text, config))
        values["products"], values["parent_product"] = extract_products(text, config)
        values["display_name"] = extract_display_name(text, file_name)
        values["notes"] = loi_notes(classification, text)

        populated = {name: fv for name, fv in values.items() if fv is not None}
        if classification.exclude_monetary:
            for name in MONETARY_FIELDS:
                populated.pop(name, None)

        confidence, warnings = score_fields(populated, config)
        field_set = ExtractedFieldSet(
            contract_type=classification.type,
            end_date_derived=end_date_derived,
            currency=config.default_currency,
            confidence=confidence,
            warnings=warnings,
            sources={name: fv.source for name, fv in populated.items()},
            **{name: fv.value for name, fv in populated.items()},
        )
        logger.info(
            f"Extracted {len(populated)} fields from {file_name or 'document'} "
            f"(overall confidence {field_set.overall_confidence:.2f}, {len(warnings)} warnings)"
        )
        return field_set
