"""Pipeline error taxonomy."""

from typing import Any, Dict, List, Optional, Sequence

from contractdesk.utils.fallback import Failure


class ContractPipelineError(Exception):
    """Base class for every pipeline failure."""

    def to_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "message": str(self)}


class _ExhaustedError(ContractPipelineError):
    stage = "pipeline"

    def __init__(self, file_name: str, attempts: Sequence[Failure]):
        self.file_name = file_name
        self.attempts = list(attempts)
        tried = ", ".join(f"{a.name} ({a.reason})" for a in self.attempts) or "none"
        super().__init__(f"All {self.stage} strategies failed for {file_name}: {tried}")

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["attempts"] = [{"strategy": a.name, "reason": a.reason} for a in self.attempts]
        return payload


class RetrievalFailed(_ExhaustedError):
    """Every transport strategy failed to produce the document bytes."""
    stage = "retrieval"


class ExtractionFailed(_ExhaustedError):
    """No text strategy produced usable text; the document is likely image-only or encrypted."""
    stage = "extraction"


class ValidationFailed(ContractPipelineError):
    """Required fields are missing. Recoverable through human overrides."""

    def __init__(self, validation: Any):
        self.validation = validation
        missing = ", ".join(e.field for e in validation.errors)
        super().__init__(f"Validation failed: {missing}")


class LookupFailed(ContractPipelineError):
    """A CRM identifier could not be resolved. Downgraded to a warning by callers."""

    def __init__(self, field: str, value: Optional[str], reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field} lookup failed for {value!r}: {reason}")


class CreationFailed(ContractPipelineError):
    """The CRM rejected the create call, or a referenced id no longer exists."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


class AttachmentFailed(ContractPipelineError):
    """The document could not be attached to an already created record."""

    def __init__(self, record_id: str, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Attachment to {record_id} failed: {reason}")
