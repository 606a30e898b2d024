"""
Immutable pipeline configuration.

Every stage is a pure function of (input, PipelineConfig). Keyword tables,
the product catalog, the internal signer directory and the CRM field names
all live here instead of module-level singletons, so tests and deployments
pass their own instance explicitly.
"""

from pathlib import Path
from typing import Dict, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from contractdesk.domain.value_objects import ContractStatus, ContractType


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ContractTypeRule(_Frozen):
    """Keyword rule for one candidate contract type."""
    type: ContractType
    keywords: Tuple[str, ...]
    confidence_boost: float
    exclude_monetary: bool = False


class ClassificationOverrides(_Frozen):
    """Markers for the ordered override rules applied after base scoring."""
    cab_filename_markers: Tuple[str, ...] = ("cab", "memorandum")
    cab_body_markers: Tuple[str, ...] = ("cab memorandum", "customer advisory board")
    cab_confidence_floor: float = 0.9

    restated_markers: Tuple[str, ...] = ("amended and restated",)
    service_delivery_terms: Tuple[str, ...] = (
        "services",
        "subscription",
        "service order",
        "statement of work",
        "annual fee",
        "monthly fee",
        "service period",
    )
    restated_confidence_floor: float = 0.85

    pricing_table_min_rows: int = 2
    pricing_table_confidence_floor: float = 0.9


class ProductEntry(_Frozen):
    name: str
    aliases: Tuple[str, ...]


class InternalSigner(_Frozen):
    """A person allowed to sign on behalf of the internal company."""
    name: str
    aliases: Tuple[str, ...] = ()
    search_name: Optional[str] = Field(default=None, description="Name used for the CRM user lookup")

    @property
    def lookup_name(self) -> str:
        return self.search_name or self.name

    def matches(self, candidate: str) -> bool:
        wanted = " ".join(candidate.lower().split())
        return any(wanted == n.lower() for n in (self.name, *self.aliases))


class CrmFieldMap(_Frozen):
    """CRM API names for each logical contract field."""
    display_name: str = "Contract_Name__c"
    account: str = "AccountId"
    start_date: str = "StartDate"
    end_date: str = "EndDate"
    term_months: str = "ContractTerm"
    contract_type: str = "Contract_Type__c"
    status: str = "Status"
    owner: str = "OwnerId"
    total_contract_value: str = "Contract_Value__c"
    annual_contract_value: str = "Annualized_Revenue__c"
    monthly_amount: str = "Amount__c"
    parent_product: str = "Parent_Product__c"
    product_line: str = "Product_Line__c"
    counterparty_signer: str = "CustomerSignedId"
    counterparty_signer_name: str = "Contact_Signed__c"
    counterparty_signer_title: str = "CustomerSignedTitle"
    signature_date: str = "CustomerSignedDate"
    internal_signer: str = "CompanySignedId"
    notes: str = "Notes__c"
    currency: str = "Currency__c"
    industry: str = "Industry__c"

    def api_name(self, logical: str) -> str:
        return getattr(self, logical)


DEFAULT_TYPE_RULES: Tuple[ContractTypeRule, ...] = (
    ContractTypeRule(
        type=ContractType.LOI,
        keywords=(
            "Customer Advisory Board", "CAB", "Advisory Board Appointment",
            "Letter of Intent", "LOI", "Memorandum", "CAB Memorandum",
            "Non-binding", "advisory capacity", "committed spend",
        ),
        confidence_boost=0.15,
        exclude_monetary=True,
    ),
    ContractTypeRule(
        type=ContractType.RECURRING,
        keywords=(
            "Master Services Agreement", "MSA", "Subscription", "Annual",
            "Recurring", "Service Order", "Statement of Work", "SOW",
            "Year 1", "Year 2", "Year 3", "annual fee", "monthly fee",
            "Order Form", "Agreement",
        ),
        confidence_boost=0.1,
    ),
    ContractTypeRule(
        type=ContractType.AMENDMENT,
        keywords=(
            "Amendment", "Amended and Restated", "Addendum", "Modification",
            "Supplemental", "extends", "amends",
        ),
        confidence_boost=0.1,
    ),
)

DEFAULT_PRODUCTS: Tuple[ProductEntry, ...] = (
    ProductEntry(name="AI Augmented - Contracting", aliases=("ai-augmented contracting", "ai augmented contracting", "aiaugmented contracting")),
    ProductEntry(name="Insights", aliases=("insights",)),
    ProductEntry(name="Compliance", aliases=("compliance",)),
    ProductEntry(name="sigma", aliases=("sigma",)),
    ProductEntry(name="Litigation", aliases=("litigation",)),
    ProductEntry(name="M&A", aliases=("m&a",)),
)

DEFAULT_LABELS: Dict[str, str] = {
    "display_name": "Contract Name",
    "account": "Account Name",
    "start_date": "Contract Start Date",
    "end_date": "Contract End Date",
    "term_months": "Contract Term (months)",
    "contract_type": "Contract Type",
    "status": "Status",
    "owner": "Contract Owner",
    "total_contract_value": "Total Contract Value",
    "annual_contract_value": "Annual Contract Value",
    "monthly_amount": "Monthly Amount",
}


class PipelineConfig(_Frozen):
    """Everything the pipeline stages read besides their direct input."""
    type_rules: Tuple[ContractTypeRule, ...] = DEFAULT_TYPE_RULES
    overrides: ClassificationOverrides = Field(default_factory=ClassificationOverrides)
    baseline_type: ContractType = ContractType.RECURRING
    baseline_confidence: float = 0.5

    products: Tuple[ProductEntry, ...] = DEFAULT_PRODUCTS
    multiple_products_label: str = "Multiple"

    internal_company_aliases: Tuple[str, ...] = ()
    internal_signers: Tuple[InternalSigner, ...] = ()
    owner_directory: Dict[str, str] = Field(default_factory=dict, description="Owner name to CRM user id")

    crm_fields: CrmFieldMap = Field(default_factory=CrmFieldMap)
    labels: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_LABELS))
    required_fields: Tuple[str, ...] = (
        "display_name", "account", "start_date", "end_date",
        "term_months", "contract_type", "status", "owner",
    )
    default_status: ContractStatus = ContractStatus.DRAFT
    default_currency: str = "USD"

    min_text_chars: int = 100
    recovery_min_chars: int = 40
    date_year_window: Tuple[int, int] = (2000, 2099)
    plausible_year_range: Tuple[int, int] = (2020, 2035)
    plausible_term_range: Tuple[int, int] = (1, 120)
    loi_default_term_months: int = 12
    raw_text_sample_chars: int = 2000

    def label(self, logical: str) -> str:
        return self.labels.get(logical, logical)

    def internal_signer_for(self, name: str) -> Optional[InternalSigner]:
        return next((s for s in self.internal_signers if s.matches(name)), None)

    def is_internal_company(self, name: str) -> bool:
        lowered = name.lower()
        return any(alias.lower() in lowered for alias in self.internal_company_aliases)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "PipelineConfig":
        """
        Load a configuration from JSON. Omitted keys keep their defaults.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Pipeline config {path} does not exist.")
        config = cls.model_validate_json(path.read_text(encoding="utf-8"))
        logger.info(
            f"Loaded pipeline config from {path}: {len(config.internal_signers)} internal signers, "
            f"{len(config.products)} products"
        )
        return config


def load_pipeline_config(path: Optional[str | Path] = None) -> PipelineConfig:
    """Return the config at ``path``, or the defaults when no path is given."""
    if path is None:
        return PipelineConfig()
    return PipelineConfig.from_json_file(path)
