"""Classification result model"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from contractdesk.domain.value_objects import ContractType


class ContractClassification(BaseModel):
    """Advisory contract type assignment. A human can always override it."""
    model_config = ConfigDict(frozen=True)

    type: ContractType
    confidence: float = Field(..., ge=0.0, le=1.0)
    exclude_monetary: bool = False
    matched_keyword_count: int = 0
    applied_overrides: List[str] = Field(default_factory=list)

    def summary(self) -> dict:
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "exclude_monetary": self.exclude_monetary,
        }
