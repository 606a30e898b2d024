"""
Pipeline models.

One module per stage output:
- document: SourceFile, SourceDocument, ExtractedText
- classification: ContractClassification
- fields: FieldValue, ExtractedFieldSet
- validation: FieldError, SuggestedFix, ValidationResult
- enrichment: EnrichmentResult
- creation: CreationRecord, CreateResult, AttachResult, CreationOutcome, ContractOverrides
- analysis: AnalysisResult
"""

from contractdesk.models.document import SourceFile, SourceDocument, ExtractedText
from contractdesk.models.classification import ContractClassification
from contractdesk.models.fields import (
    FieldValue,
    ExtractedFieldSet,
    MONETARY_FIELDS,
    mean_confidence,
)
from contractdesk.models.validation import FieldError, SuggestedFix, ValidationResult
from contractdesk.models.enrichment import EnrichmentResult
from contractdesk.models.creation import (
    CreationRecord,
    CreateResult,
    AttachResult,
    CreationOutcome,
    ContractOverrides,
)
from contractdesk.models.analysis import AnalysisResult

__all__ = [
    "SourceFile",
    "SourceDocument",
    "ExtractedText",
    "ContractClassification",
    "FieldValue",
    "ExtractedFieldSet",
    "MONETARY_FIELDS",
    "mean_confidence",
    "FieldError",
    "SuggestedFix",
    "ValidationResult",
    "EnrichmentResult",
    "CreationRecord",
    "CreateResult",
    "AttachResult",
    "CreationOutcome",
    "ContractOverrides",
    "AnalysisResult",
]
