"""
Contract ingestion service.

Ties the pipeline stages together for the chat and HTTP entry points:

    retrieve -> extract text -> classify -> extract fields -> enrich
             -> cache for confirmation -> create -> attach -> (activate)

Retrieval and extraction failures abort the run. Validation failures keep the
cached analysis so the human can supply the missing values and confirm again.
"""

from typing import Optional

from loguru import logger
from neopipe import Err, Ok, Result

from contractdesk.core.classification.classifier import ContractClassifier
from contractdesk.core.config import PipelineConfig
from contractdesk.core.errors import ContractPipelineError
from contractdesk.core.extraction.text_extractor import TextExtractor
from contractdesk.core.fields.engine import FieldExtractionEngine
from contractdesk.core.retrieval.retriever import DocumentRetriever
from contractdesk.dbs.interfaces.confirmation_store import (
    AbstractConfirmationStore,
    PendingActivation,
    PendingConfirmation,
)
from contractdesk.models.analysis import AnalysisResult
from contractdesk.models.creation import ContractOverrides, CreationOutcome
from contractdesk.models.document import SourceDocument, SourceFile
from contractdesk.models.enrichment import EnrichmentResult
from contractdesk.services.creation_service import ContractCreationService
from contractdesk.services.enrichment_service import CrmEnrichmentService

NO_PENDING_ANALYSIS = "No pending analysis for this conversation; upload the document again"
NO_PENDING_ACTIVATION = "No recently created contract to activate in this conversation"


class ContractIngestionService:
    """Document analysis and confirmation-driven contract creation."""

    def __init__(
        self,
        config: PipelineConfig,
        extractor: TextExtractor,
        confirmations: AbstractConfirmationStore[PendingConfirmation],
        activations: AbstractConfirmationStore[PendingActivation],
        enrichment: Optional[CrmEnrichmentService] = None,
        creation: Optional[ContractCreationService] = None,
        retriever: Optional[DocumentRetriever] = None,
    ):
        self.config = config
        self.extractor = extractor
        self.classifier = ContractClassifier(config)
        self.field_engine = FieldExtractionEngine(config)
        self.confirmations = confirmations
        self.activations = activations
        self.enrichment = enrichment
        self.creation = creation
        self.retriever = retriever

    async def analyze_document(self, document: SourceDocument) -> Result[AnalysisResult, ContractPipelineError]:
        """
        Run extraction, classification, field extraction and enrichment.

        Returns:
            Result[Ok, Err]: Ok with the analysis, Err with the pipeline error
            that aborted the run
        """
        try:
            extracted = await self.extractor.extract(document)
        except ContractPipelineError as e:
            return Err(e)

        classification = self.classifier.classify(extracted.text, document.file_name)
        fields = self.field_engine.extract(extracted.text, classification, document.file_name)
        enrichment = await self.enrichment.enrich(fields) if self.enrichment else EnrichmentResult()

        analysis = AnalysisResult(
            file_name=document.file_name,
            classification=classification,
            fields=fields,
            enrichment=enrichment,
            extraction_method=extracted.method,
            raw_text_sample=extracted.sample(self.config.raw_text_sample_chars),
        )
        logger.info(
            f"Analyzed {document.file_name}: {classification.type}, "
            f"overall confidence {analysis.overall_confidence:.2f}"
        )
        return Ok(analysis)

    async def submit_document(
        self,
        user_id: str,
        conversation_id: str,
        document: SourceDocument,
    ) -> Result[AnalysisResult, ContractPipelineError]:
        """Analyze ``document`` and hold it for confirmation by (user, conversation)."""
        result = await self.analyze_document(document)
        if result.is_err():
            return result
        analysis = result.unwrap()
        await self.confirmations.put(
            user_id,
            conversation_id,
            PendingConfirmation(
                analysis=analysis,
                document_base64=document.to_base64(),
                file_name=document.file_name,
                content_type=document.content_type,
            ),
        )
        return Ok(analysis)

    async def ingest_upload(
        self,
        user_id: str,
        conversation_id: str,
        file: SourceFile,
    ) -> Result[AnalysisResult, ContractPipelineError]:
        """Download a chat upload, analyze it and hold it for confirmation."""
        if self.retriever is None:
            raise RuntimeError("ingest_upload requires a DocumentRetriever")
        try:
            document = await self.retriever.retrieve(file)
        except ContractPipelineError as e:
            return Err(e)
        return await self.submit_document(user_id, conversation_id, document)

    async def confirm(
        self,
        user_id: str,
        conversation_id: str,
        overrides: Optional[ContractOverrides] = None,
    ) -> Result[CreationOutcome, CreationOutcome]:
        """
        Create the contract for the pending analysis.

        A needs-confirmation or failure outcome keeps the pending analysis; a
        successful creation clears it and opens the activation window.
        """
        if self.creation is None:
            raise RuntimeError("confirm requires a ContractCreationService")

        pending = await self.confirmations.get(user_id, conversation_id)
        if pending is None:
            return Err(CreationOutcome.failed(NO_PENDING_ANALYSIS))

        document = SourceDocument.from_base64(pending.document_base64, pending.file_name, pending.content_type)
        result = await self.creation.create(pending.analysis, document, overrides)
        if result.is_err():
            return result

        outcome = result.unwrap()
        await self.confirmations.discard(user_id, conversation_id)
        await self.activations.put(
            user_id,
            conversation_id,
            PendingActivation(record_id=outcome.record_id, display_number=outcome.display_number),
        )
        return Ok(outcome)

    async def cancel(self, user_id: str, conversation_id: str) -> bool:
        discarded = await self.confirmations.discard(user_id, conversation_id)
        logger.info(f"Cancel for user={user_id} conversation={conversation_id}: discarded={discarded}")
        return discarded

    async def activate(self, user_id: str, conversation_id: str) -> Result[CreationOutcome, CreationOutcome]:
        """Activate the contract created in this conversation, within the activation window."""
        if self.creation is None:
            raise RuntimeError("activate requires a ContractCreationService")

        pending = await self.activations.get(user_id, conversation_id)
        if pending is None:
            return Err(CreationOutcome.failed(NO_PENDING_ACTIVATION))

        result = await self.creation.activate(pending.record_id, pending.object_type)
        if result.is_err():
            return Err(CreationOutcome.failed(result.unwrap_err()))

        await self.activations.discard(user_id, conversation_id)
        return Ok(CreationOutcome(
            success=True,
            record_id=pending.record_id,
            display_number=pending.display_number,
            record_url=self.creation.crm.record_url(pending.object_type, pending.record_id),
        ))
