"""
Creation models.

- CreationRecord: field map submitted to the CRM, never holding empty values
- CreateResult / AttachResult: CRM collaborator responses
- CreationOutcome: what the orchestrator reports back to the messaging layer
- ContractOverrides: human-supplied corrections applied at confirmation
"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from contractdesk.domain.value_objects import ContractStatus, ContractType
from contractdesk.models.validation import FieldError, SuggestedFix, ValidationResult


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


class CreationRecord(BaseModel):
    """CRM field name to value map for a contract."""
    object_type: str = "Contract"
    fields: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("fields")
    @classmethod
    def strip_empty(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in value.items() if not _is_empty(v)}

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def has(self, name: str) -> bool:
        return name in self.fields

    def without(self, *names: str) -> "CreationRecord":
        return CreationRecord(
            object_type=self.object_type,
            fields={k: v for k, v in self.fields.items() if k not in names},
        )


class CreateResult(BaseModel):
    id: Optional[str] = None
    success: bool
    errors: List[str] = Field(default_factory=list)


class AttachResult(BaseModel):
    success: bool
    attachment_id: Optional[str] = None
    error: Optional[str] = None


class CreationOutcome(BaseModel):
    """Result of a confirmation attempt."""
    success: bool
    record_id: Optional[str] = None
    display_number: Optional[str] = None
    record_url: Optional[str] = None
    attachment_success: bool = False
    attachment_id: Optional[str] = None
    attachment_error: Optional[str] = None
    applied_field_summary: List[str] = Field(default_factory=list)

    needs_confirmation: bool = False
    validation_errors: List[FieldError] = Field(default_factory=list)
    suggested_fixes: List[SuggestedFix] = Field(default_factory=list)

    error: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def awaiting_input(cls, validation: ValidationResult, warnings: Optional[List[str]] = None) -> "CreationOutcome":
        return cls(
            success=False,
            needs_confirmation=True,
            validation_errors=validation.errors,
            suggested_fixes=validation.suggested_fixes,
            warnings=warnings or [],
        )

    @classmethod
    def failed(cls, error: str, warnings: Optional[List[str]] = None) -> "CreationOutcome":
        return cls(success=False, error=error, warnings=warnings or [])


class ContractOverrides(BaseModel):
    """Values a human supplied during confirmation. Each one wins over the extracted value."""
    display_name: Optional[str] = None
    counterparty_name: Optional[str] = Field(default=None, description="Resolved to an account through the CRM")
    account_id: Optional[str] = None
    owner_name: Optional[str] = Field(default=None, description="Resolved to a user through the CRM or owner directory")
    owner_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    term_months: Optional[int] = Field(default=None, gt=0)
    contract_type: Optional[ContractType] = None
    status: Optional[ContractStatus] = None
    total_contract_value: Optional[float] = Field(default=None, ge=0)
    annual_contract_value: Optional[float] = Field(default=None, ge=0)
    monthly_amount: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

    def provided(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
