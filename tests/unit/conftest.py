"""Shared fixtures: an in-memory CRM, pipeline config and sample contract texts."""

from typing import Any, Dict, List, Optional

import pytest

from contractdesk.core.config import InternalSigner, PipelineConfig
from contractdesk.core.extraction.text_extractor import TextExtractor
from contractdesk.dbs.adapters.memory_confirmation_adapter import MemoryConfirmationAdapter
from contractdesk.dbs.interfaces.crm_store import AbstractCrmStore, Condition, SearchExpression
from contractdesk.models.creation import AttachResult, CreateResult
from contractdesk.models.document import SourceDocument
from contractdesk.services.creation_service import ContractCreationService
from contractdesk.services.enrichment_service import CrmEnrichmentService
from contractdesk.services.ingestion_service import ContractIngestionService


RECURRING_TEXT = """Acme Analytics - Master Services Agreement

This Master Services Agreement is entered into by Acme Analytics, Inc. ("Customer") and Contoso Legal Tech LLC.
Effective Date: January 1, 2025
The initial term of this Agreement is thirty-six (36) months.

Pricing
Year 1: $812,500
Year 2: $1,150,000
Year 3: $1,000,000

Subscription covers the Insights and Compliance modules.

Signed By: Jane Doe
Title: Chief Financial Officer
Date: 01/15/2025

Signed By: Sam Seller
Title: VP Sales
Date: 01/20/2025
"""

CAB_TEXT = """CUSTOMER ADVISORY BOARD MEMORANDUM

Advisory Board Appointment - Globex Corporation

This memorandum confirms the appointment of Globex Corporation to the Customer Advisory Board.
Dated: March 3, 2025
Globex intends a committed spend of $250,000 while serving in an advisory capacity.

Name: Hank Scorpio
Title: Chief Executive Officer
"""

CAB_FILE_NAME = "Globex CAB Memorandum.pdf"


def _matches(row: Dict[str, Any], condition: Condition) -> bool:
    value = row.get(condition.field)
    if condition.operator == "=":
        return value == condition.value
    if condition.operator == "!=":
        return value != condition.value
    return isinstance(value, str) and str(condition.value).lower() in value.lower()


class FakeCrm(AbstractCrmStore):
    """Records every call; searches filter the seeded rows."""

    def __init__(self, records: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.records = {k: list(v) for k, v in (records or {}).items()}
        self.searches: List[SearchExpression] = []
        self.created: List[Dict[str, Any]] = []
        self.updated: List[Dict[str, Any]] = []
        self.attached: List[str] = []
        self.create_result: Optional[CreateResult] = None
        self.attach_error: Optional[str] = None

    async def search(self, expression: SearchExpression) -> List[Dict[str, Any]]:
        self.searches.append(expression)
        rows = self.records.get(expression.object_type, [])
        return [dict(r) for r in rows if all(_matches(r, c) for c in expression.conditions)][: expression.limit]

    async def create(self, object_type: str, fields: Dict[str, Any]) -> CreateResult:
        self.created.append(dict(fields))
        if self.create_result is not None:
            return self.create_result
        record_id = f"800{len(self.created):012d}"
        self.records.setdefault(object_type, []).append(
            {"Id": record_id, "ContractNumber": f"{len(self.created):08d}", **fields}
        )
        return CreateResult(id=record_id, success=True)

    async def update(self, object_type: str, record_id: str, fields: Dict[str, Any]) -> CreateResult:
        self.updated.append({"Id": record_id, **fields})
        return CreateResult(id=record_id, success=True)

    async def attach(self, record_id: str, file_name: str, data: bytes) -> AttachResult:
        if self.attach_error:
            return AttachResult(success=False, error=self.attach_error)
        self.attached.append(file_name)
        return AttachResult(success=True, attachment_id=f"068{len(self.attached):012d}")

    def record_url(self, object_type: str, record_id: str) -> Optional[str]:
        return f"https://crm.example/{object_type}/{record_id}"


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig(
        internal_company_aliases=("Contoso",),
        internal_signers=(InternalSigner(name="Sam Seller", aliases=("Samuel Seller",)),),
        owner_directory={"Olivia Owner": "005000000000OWN"},
    )


@pytest.fixture
def crm_records() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "Account": [
            {"Id": "001000000000ACM", "Name": "Acme Analytics", "OwnerId": "005000000000AMO",
             "Owner": {"Name": "Alex Manager"}, "Industry": "Software"},
            {"Id": "001000000000ACX", "Name": "Acme Analytics Europe", "OwnerId": "005000000000AMO",
             "Industry": "Software"},
        ],
        "User": [
            {"Id": "005000000000AMO", "Name": "Alex Manager", "IsActive": True},
            {"Id": "005000000000SAM", "Name": "Sam Seller", "IsActive": True},
            {"Id": "005000000000OWN", "Name": "Olivia Owner", "IsActive": True},
        ],
        "Contact": [
            {"Id": "003000000000JAN", "Name": "Jane Doe", "AccountId": "001000000000ACM", "Title": "CFO"},
        ],
    }


@pytest.fixture
def fake_crm(crm_records) -> FakeCrm:
    return FakeCrm(crm_records)


@pytest.fixture
def recurring_text() -> str:
    return RECURRING_TEXT


@pytest.fixture
def cab_text() -> str:
    return CAB_TEXT


def plain_text_extractor(config: PipelineConfig) -> TextExtractor:
    """Extractor that treats the document bytes as UTF-8 text."""
    return TextExtractor(config, strategies=[("plain_text", lambda data: data.decode("utf-8"), 40)])


def text_document(text: str, file_name: str = "contract.pdf") -> SourceDocument:
    return SourceDocument(data=text.encode("utf-8"), file_name=file_name, content_type="application/pdf")


@pytest.fixture
def enrichment(fake_crm, config) -> CrmEnrichmentService:
    return CrmEnrichmentService(fake_crm, config)


@pytest.fixture
def creation(fake_crm, enrichment, config) -> ContractCreationService:
    return ContractCreationService(fake_crm, enrichment, config)


@pytest.fixture
def ingestion_service(config, enrichment, creation) -> ContractIngestionService:
    return ContractIngestionService(
        config=config,
        extractor=plain_text_extractor(config),
        confirmations=MemoryConfirmationAdapter(),
        activations=MemoryConfirmationAdapter(),
        enrichment=enrichment,
        creation=creation,
    )
