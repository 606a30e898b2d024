"""Base class for all services with factory pattern support."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, Optional, TypeVar

from contractdesk.core.config import PipelineConfig, load_pipeline_config
from contractdesk.core.extraction.text_extractor import TextExtractor
from contractdesk.core.retrieval.retriever import DocumentRetriever
from contractdesk.dbs.adapters.memory_confirmation_adapter import MemoryConfirmationAdapter
from contractdesk.dbs.adapters.salesforce_crm_adapter import SalesforceCrmAdapter
from contractdesk.integrations.slack.file_client import SlackFileClient
from contractdesk.services.creation_service import ContractCreationService
from contractdesk.services.enrichment_service import CrmEnrichmentService
from contractdesk.services.ingestion_service import ContractIngestionService
from contractdesk.utils.settings.core import PipelineSettings, SalesforceSettings, SlackSettings
from contractdesk.utils.settings.factory import settings_factory

T = TypeVar('T')


class ServiceFactoryABC(ABC, Generic[T]):
    """
    Abstract base class for service factories.

    Each factory implements create_default() for standardized instantiation
    from environment settings.
    """

    @classmethod
    @abstractmethod
    def create_default(cls) -> T:
        """
        Create a default instance of the service with standard configuration.

        Returns:
            T: Configured instance of the service
        """
        raise NotImplementedError("Subclasses must implement create_default() factory method")

    @classmethod
    def from_env_file(cls, env_path: str | Path) -> T:
        """
        Create an instance of the service using settings from a specific environment file.

        Args:
            env_path (str): Path to the .env file to load settings from.

        Returns:
            T: Configured instance of the service
        """
        raise NotImplementedError("Subclasses must implement from_env_file() factory method")


class ContractIngestionServiceFactory(ServiceFactoryABC[ContractIngestionService]):
    """Wires the ingestion service to Slack, Salesforce and in-memory caches."""

    @classmethod
    def create(
        cls,
        pipeline_settings: PipelineSettings,
        salesforce_settings: SalesforceSettings,
        slack_settings: SlackSettings,
        config: Optional[PipelineConfig] = None,
    ) -> ContractIngestionService:
        config = config or load_pipeline_config(pipeline_settings.config_path)
        crm = SalesforceCrmAdapter(salesforce_settings)
        enrichment = CrmEnrichmentService(crm, config)
        retriever = DocumentRetriever(
            SlackFileClient(slack_settings, timeout=pipeline_settings.retrieval_timeout_seconds),
            min_bytes=pipeline_settings.min_document_bytes,
            timeout=pipeline_settings.retrieval_timeout_seconds,
        )
        return ContractIngestionService(
            config=config,
            extractor=TextExtractor(config, parser_timeout=pipeline_settings.parser_timeout_seconds),
            confirmations=MemoryConfirmationAdapter(ttl_seconds=pipeline_settings.confirmation_ttl_seconds),
            activations=MemoryConfirmationAdapter(ttl_seconds=pipeline_settings.activation_ttl_seconds),
            enrichment=enrichment,
            creation=ContractCreationService(crm, enrichment, config),
            retriever=retriever,
        )

    @classmethod
    def create_default(cls) -> ContractIngestionService:
        return cls.create(
            settings_factory.create_pipeline_settings(),
            settings_factory.create_salesforce_settings(),
            settings_factory.create_slack_settings(),
        )

    @classmethod
    def from_env_file(cls, env_path: str | Path) -> ContractIngestionService:
        return cls.create(
            PipelineSettings.from_env_file(env_path),
            SalesforceSettings.from_env_file(env_path),
            SlackSettings.from_env_file(env_path),
        )

    @classmethod
    def create_offline(cls, config: Optional[PipelineConfig] = None) -> ContractIngestionService:
        """Analysis only: no CRM, no chat platform."""
        config = config or PipelineConfig()
        return ContractIngestionService(
            config=config,
            extractor=TextExtractor(config),
            confirmations=MemoryConfirmationAdapter(),
            activations=MemoryConfirmationAdapter(),
        )
