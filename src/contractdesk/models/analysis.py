"""Analysis result aggregate handed to the messaging layer and the confirmation cache"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field

from contractdesk.models.classification import ContractClassification
from contractdesk.models.enrichment import EnrichmentResult
from contractdesk.models.fields import ExtractedFieldSet


class AnalysisResult(BaseModel):
    success: bool = True
    file_name: str
    classification: ContractClassification
    fields: ExtractedFieldSet
    enrichment: EnrichmentResult = Field(default_factory=EnrichmentResult)
    extraction_method: str
    raw_text_sample: str = ""
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def overall_confidence(self) -> float:
        return self.fields.overall_confidence

    def to_output(self) -> Dict[str, Any]:
        """Analysis output shape consumed by the messaging layer"""
        return {
            "success": self.success,
            "file_name": self.file_name,
            "classification": self.classification.summary(),
            "fields": self.fields.to_output(),
            "enrichment": self.enrichment.model_dump(),
            "overall_confidence": self.overall_confidence,
            "extraction_method": self.extraction_method,
            "raw_text_sample": self.raw_text_sample,
            "analyzed_at": self.analyzed_at.isoformat(),
        }
