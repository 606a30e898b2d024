"""Validation gate results"""

from typing import List, Optional

from pydantic import BaseModel, Field

from contractdesk.domain.value_objects import FixKind


class FieldError(BaseModel):
    field: str
    label: str
    message: str


class SuggestedFix(BaseModel):
    field: str
    suggestion: str
    kind: FixKind
    options: List[str] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Outcome of the required-field gate. Recomputed on every confirmation attempt."""
    valid: bool
    errors: List[FieldError] = Field(default_factory=list)
    suggested_fixes: List[SuggestedFix] = Field(default_factory=list)

    def errors_for(self, field: str) -> List[FieldError]:
        return [e for e in self.errors if e.field == field]

    def fix_for(self, field: str) -> Optional[SuggestedFix]:
        return next((f for f in self.suggested_fixes if f.field == field), None)
