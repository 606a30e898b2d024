"""Services package for high-level business logic."""

from contractdesk.services.enrichment_service import CrmEnrichmentService, rank_candidates
from contractdesk.services.creation_service import ContractCreationService
from contractdesk.services.ingestion_service import ContractIngestionService
from contractdesk.services.factory import ContractIngestionServiceFactory, ServiceFactoryABC

__all__ = [
    "CrmEnrichmentService",
    "rank_candidates",
    "ContractCreationService",
    "ContractIngestionService",
    "ContractIngestionServiceFactory",
    "ServiceFactoryABC",
]
