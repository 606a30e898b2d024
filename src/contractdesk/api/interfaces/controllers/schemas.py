"""Request and response schemas for the contracts API"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from contractdesk.models.creation import ContractOverrides


# Request Models
class ConversationRequest(BaseModel):
    """Identifies the pending analysis by user and conversation"""

    user_id: str = Field(..., min_length=1, description="Chat user identifier")
    conversation_id: str = Field(..., min_length=1, description="Conversation or thread identifier")


class ConfirmRequest(ConversationRequest):
    """Request model for confirming a pending analysis"""

    overrides: ContractOverrides = Field(
        default_factory=ContractOverrides, description="Human-supplied values that win over extracted ones"
    )


# Response Models
class AnalysisResponse(BaseModel):
    """Analysis output for the messaging layer"""

    success: bool
    file_name: str
    classification: Dict[str, Any]
    fields: Dict[str, Any]
    enrichment: Dict[str, Any]
    overall_confidence: float
    extraction_method: str
    raw_text_sample: str
    analyzed_at: str


class CancelResponse(BaseModel):
    discarded: bool
    message: Optional[str] = None
