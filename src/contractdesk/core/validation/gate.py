"""
Required-field gate over a CreationRecord.

Every missing required field yields exactly one error and one suggested fix.
Creation must never run while the gate reports invalid.
"""

from datetime import date
from typing import Any, List, Optional

from loguru import logger

from contractdesk.core.config import PipelineConfig
from contractdesk.core.errors import ValidationFailed
from contractdesk.domain.value_objects import ContractStatus, ContractType, FixKind
from contractdesk.models.creation import CreationRecord
from contractdesk.models.validation import FieldError, SuggestedFix, ValidationResult

FIX_KINDS = {
    "account": FixKind.ACCOUNT_LOOKUP,
    "owner": FixKind.OWNER_SELECT,
    "start_date": FixKind.DATE_INPUT,
    "end_date": FixKind.DATE_INPUT,
    "term_months": FixKind.NUMBER_INPUT,
    "contract_type": FixKind.PICKLIST_SELECT,
    "status": FixKind.PICKLIST_SELECT,
    "display_name": FixKind.TEXT_INPUT,
}

SUGGESTIONS = {
    FixKind.ACCOUNT_LOOKUP: "Provide the customer account name so it can be looked up in the CRM",
    FixKind.OWNER_SELECT: "Choose the contract owner",
    FixKind.DATE_INPUT: "Enter the date as YYYY-MM-DD",
    FixKind.NUMBER_INPUT: "Enter the contract term in months",
    FixKind.PICKLIST_SELECT: "Pick one of the allowed values",
    FixKind.TEXT_INPUT: "Enter a value",
    FixKind.CURRENCY_INPUT: "Enter the total or annual contract value",
}


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    return None


class ValidationGate:
    """Checks a CreationRecord for the fields the CRM requires."""

    def __init__(self, config: PipelineConfig):
        self.config = config

    def _options(self, field: str) -> List[str]:
        if field == "owner":
            return sorted(self.config.owner_directory)
        if field == "contract_type":
            return [t.value for t in ContractType]
        if field == "status":
            return [s.value for s in ContractStatus]
        return []

    def _fix(self, field: str, kind: Optional[FixKind] = None) -> SuggestedFix:
        kind = kind or FIX_KINDS.get(field, FixKind.TEXT_INPUT)
        suggestion = SUGGESTIONS[kind]
        if kind == FixKind.TEXT_INPUT:
            suggestion = f"Enter the {self.config.label(field).lower()}"
        return SuggestedFix(field=field, suggestion=suggestion, kind=kind, options=self._options(field))

    def validate(self, record: CreationRecord) -> ValidationResult:
        config = self.config
        fields = config.crm_fields
        errors: List[FieldError] = []
        fixes: List[SuggestedFix] = []

        for field in config.required_fields:
            if record.has(fields.api_name(field)):
                continue
            label = config.label(field)
            errors.append(FieldError(field=field, label=label, message=f"{label} is required"))
            fixes.append(self._fix(field))

        start = _as_date(record.get(fields.start_date))
        end = _as_date(record.get(fields.end_date))
        if start and end and end <= start:
            errors.append(FieldError(
                field="end_date",
                label=config.label("end_date"),
                message=f"{config.label('end_date')} ({end}) must be after {config.label('start_date')} ({start})",
            ))
            fixes.append(self._fix("end_date"))

        if record.get(fields.contract_type) == ContractType.RECURRING.value and not (
            record.has(fields.total_contract_value) or record.has(fields.annual_contract_value)
        ):
            fixes.append(self._fix("total_contract_value", FixKind.CURRENCY_INPUT))

        result = ValidationResult(valid=not errors, errors=errors, suggested_fixes=fixes)
        if errors:
            logger.info(f"Validation failed: {[e.field for e in errors]}")
        return result

    def require(self, record: CreationRecord) -> ValidationResult:
        """
        Validate ``record`` and insist it passes.

        Raises:
            ValidationFailed: If the gate reports any error
        """
        result = self.validate(record)
        if not result.valid:
            raise ValidationFailed(result)
        return result
