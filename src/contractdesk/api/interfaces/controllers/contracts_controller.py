"""Contracts controller for document analysis and contract creation."""

from functools import lru_cache

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from loguru import logger

from contractdesk.api.interfaces.controllers.schemas import (
    AnalysisResponse,
    CancelResponse,
    ConfirmRequest,
    ConversationRequest,
)
from contractdesk.core.errors import RetrievalFailed
from contractdesk.models.creation import CreationOutcome
from contractdesk.models.document import SourceDocument
from contractdesk.services.factory import ContractIngestionServiceFactory
from contractdesk.services.ingestion_service import (
    NO_PENDING_ACTIVATION,
    NO_PENDING_ANALYSIS,
    ContractIngestionService,
)


router = APIRouter(prefix="/api/contracts", tags=["contracts"])


# Dependency injection
@lru_cache(maxsize=1)
def get_ingestion_service() -> ContractIngestionService:
    """Shared ContractIngestionService; its confirmation cache lives for the process."""
    return ContractIngestionServiceFactory.create_default()


def _raise_for_outcome(outcome: CreationOutcome) -> None:
    if outcome.needs_confirmation:
        raise HTTPException(status_code=422, detail=outcome.model_dump(mode="json"))
    if outcome.error in (NO_PENDING_ANALYSIS, NO_PENDING_ACTIVATION):
        raise HTTPException(status_code=404, detail=outcome.model_dump(mode="json"))
    raise HTTPException(status_code=502, detail=outcome.model_dump(mode="json"))


# Endpoints
@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_contract(
    file: UploadFile = File(..., description="Contract document"),
    user_id: str = Form(...),
    conversation_id: str = Form(...),
    service: ContractIngestionService = Depends(get_ingestion_service),
):
    """
    Analyze an uploaded contract and hold it for confirmation.

    Example:
        curl -F file=@order.pdf -F user_id=U1 -F conversation_id=C1 /api/contracts/analyze
    """
    data = await file.read()
    document = SourceDocument(
        data=data,
        file_name=file.filename or "document.pdf",
        declared_size=len(data),
        content_type=file.content_type,
    )
    logger.info(f"Analyze request from user={user_id} conversation={conversation_id}: {document.file_name}")

    result = await service.submit_document(user_id, conversation_id, document)
    if result.is_err():
        error = result.unwrap_err()
        logger.error(f"Analysis failed: {error}")
        status_code = 502 if isinstance(error, RetrievalFailed) else 422
        raise HTTPException(status_code=status_code, detail=error.to_dict())
    return result.unwrap().to_output()


@router.post("/confirm", response_model=CreationOutcome)
async def confirm_contract(
    request: ConfirmRequest,
    service: ContractIngestionService = Depends(get_ingestion_service),
):
    """
    Create the contract for the pending analysis, applying any overrides.

    Missing required fields come back as 422 with the validation errors and
    suggested fixes; the pending analysis is kept for another attempt.
    """
    result = await service.confirm(request.user_id, request.conversation_id, request.overrides)
    if result.is_err():
        _raise_for_outcome(result.unwrap_err())
    return result.unwrap()


@router.post("/cancel", response_model=CancelResponse)
async def cancel_contract(
    request: ConversationRequest,
    service: ContractIngestionService = Depends(get_ingestion_service),
):
    """Discard the pending analysis for this conversation."""
    discarded = await service.cancel(request.user_id, request.conversation_id)
    return CancelResponse(
        discarded=discarded,
        message=None if discarded else NO_PENDING_ANALYSIS,
    )


@router.post("/activate", response_model=CreationOutcome)
async def activate_contract(
    request: ConversationRequest,
    service: ContractIngestionService = Depends(get_ingestion_service),
):
    """Activate the contract created in this conversation."""
    result = await service.activate(request.user_id, request.conversation_id)
    if result.is_err():
        _raise_for_outcome(result.unwrap_err())
    return result.unwrap()
