from pathlib import Path

from pydantic import Field
from .base import ABCBaseSettings


class SlackSettings(ABCBaseSettings):
    """Chat platform (Slack Web API) settings used for document retrieval"""
    bot_token: str | None = Field(default=None, description="Bot token with files:read scope")
    api_base_url: str = Field(default="https://slack.com/api", description="Slack Web API base URL")
    user_agent: str = Field(default="contractdesk/0.1", description="User-Agent sent on file downloads")

    model_config = ABCBaseSettings.model_config.copy()
    model_config["env_prefix"] = "SLACK_"


class SalesforceSettings(ABCBaseSettings):
    """Salesforce REST API settings"""
    instance_url: str = Field(default="https://login.salesforce.com", description="Salesforce instance URL")
    access_token: str | None = Field(default=None, description="OAuth access token")
    api_version: str = Field(default="58.0", description="REST API version")
    timeout_seconds: float = Field(default=30.0, description="Per-request timeout")
    max_read_attempts: int = Field(default=3, description="Attempts for idempotent read calls")

    model_config = ABCBaseSettings.model_config.copy()
    model_config["env_prefix"] = "SF_"

    @property
    def data_url(self) -> str:
        """Base URL for the versioned data API"""
        return f"{self.instance_url.rstrip('/')}/services/data/v{self.api_version}"

    def record_url(self, object_type: str, record_id: str) -> str:
        """Lightning URL for a record"""
        return f"{self.instance_url.rstrip('/')}/lightning/r/{object_type}/{record_id}/view"


class PipelineSettings(ABCBaseSettings):
    """Runtime knobs for the analysis and ingestion pipeline"""
    confirmation_ttl_seconds: int = Field(default=600, description="How long an analysis awaits confirmation")
    activation_ttl_seconds: int = Field(default=3600, description="How long a created contract can be activated from chat")
    retrieval_timeout_seconds: float = Field(default=30.0, description="Timeout for each download attempt")
    parser_timeout_seconds: float = Field(default=20.0, description="Timeout for the structured PDF parser")
    min_document_bytes: int = Field(default=100, description="Downloads at or below this size are rejected")
    config_path: Path | None = Field(default=None, description="Optional JSON file overriding PipelineConfig")

    model_config = ABCBaseSettings.model_config.copy()
    model_config["env_prefix"] = "PIPELINE_"


class AppSettings(ABCBaseSettings):
    """Application settings"""
    app_name: str = Field(default="contractdesk", description="Application name")
    environment: str = Field(default="local", description="Environment (local, dev, prod)")
    debug: bool = Field(default=True, description="Debug mode")
    host: str = Field(default="0.0.0.0", description="Application host")
    port: int = Field(default=8000, description="Application port")

    model_config = ABCBaseSettings.model_config.copy()
    model_config["env_prefix"] = "APP_"
