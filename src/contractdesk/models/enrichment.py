"""CRM enrichment results"""

from typing import List, Optional

from pydantic import BaseModel, Field


class EnrichmentResult(BaseModel):
    """CRM identifiers resolved from free-text names. Every id is optional."""
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    account_owner_id: Optional[str] = Field(default=None, description="Default contract owner")
    account_owner_name: Optional[str] = None
    industry: Optional[str] = None
    counterparty_signer_id: Optional[str] = None
    counterparty_signer_name: Optional[str] = None
    internal_signer_id: Optional[str] = None
    internal_signer_name: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def account_resolved(self) -> bool:
        return self.account_id is not None
