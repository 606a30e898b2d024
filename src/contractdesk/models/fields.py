"""
Extracted field models.

FieldValue is what an individual field extractor returns; ExtractedFieldSet
is the aggregate built once by the field extraction engine.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

from contractdesk.domain.value_objects import ContractType

T = TypeVar("T")

MONETARY_FIELDS = ("total_contract_value", "annual_contract_value", "monthly_amount")


@dataclass(frozen=True)
class FieldValue(Generic[T]):
    """A single extracted value with the extractor's own confidence."""
    value: T
    confidence: float
    source: str


def mean_confidence(confidence: Dict[str, Optional[float]]) -> float:
    """Arithmetic mean of populated entries, bounded to [0, 1]. Empty map gives 0."""
    populated = [v for v in confidence.values() if v is not None]
    if not populated:
        return 0.0
    return max(0.0, min(1.0, sum(populated) / len(populated)))


class ExtractedFieldSet(BaseModel):
    """Structured, confidence-scored fields for one contract."""
    model_config = ConfigDict(frozen=True)

    contract_type: ContractType
    display_name: Optional[str] = Field(default=None, description="Contract display name")
    counterparty_name: Optional[str] = Field(default=None, description="External contracting party")

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    end_date_derived: bool = Field(default=False, description="End date computed from start + term")
    term_months: Optional[int] = None

    total_contract_value: Optional[float] = None
    annual_contract_value: Optional[float] = None
    monthly_amount: Optional[float] = None
    currency: str = "USD"

    products: List[str] = Field(default_factory=list)
    parent_product: Optional[str] = None

    counterparty_signer_name: Optional[str] = None
    counterparty_signer_title: Optional[str] = None
    internal_signer_name: Optional[str] = None
    signature_date: Optional[date] = None

    notes: Optional[str] = None

    confidence: Dict[str, float] = Field(default_factory=dict, description="Per-field confidence")
    warnings: List[str] = Field(default_factory=list)
    sources: Dict[str, str] = Field(default_factory=dict, description="Strategy that produced each field")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_confidence(self) -> float:
        return mean_confidence(self.confidence)

    @property
    def product_line(self) -> Optional[str]:
        return ";".join(self.products) if self.products else None

    def has_monetary_values(self) -> bool:
        return any(getattr(self, name) is not None for name in MONETARY_FIELDS)

    def to_output(self) -> Dict[str, Any]:
        """JSON-friendly payload for the messaging layer"""
        return self.model_dump(mode="json")
