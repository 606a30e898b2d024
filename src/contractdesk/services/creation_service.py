"""
Contract creation and attachment.

Flow for one confirmation attempt:
1. build the CreationRecord from fields, enrichment and human overrides
2. run the required-field gate; stop with a needs-confirmation outcome
3. re-verify every referenced id immediately before the create call
4. create (never retried), read back the contract number
5. attach the document, best effort
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from neopipe import Err, Ok, Result

from contractdesk.core.config import PipelineConfig
from contractdesk.core.errors import AttachmentFailed, CreationFailed, ValidationFailed
from contractdesk.core.fields.term import derive_end_date
from contractdesk.core.validation.gate import ValidationGate
from contractdesk.dbs.interfaces.crm_store import AbstractCrmStore, SearchExpression
from contractdesk.domain.value_objects import ContractStatus
from contractdesk.models.analysis import AnalysisResult
from contractdesk.models.creation import ContractOverrides, CreateResult, CreationOutcome, CreationRecord
from contractdesk.models.document import SourceDocument
from contractdesk.services.enrichment_service import CrmEnrichmentService

SUMMARY_FIELDS = (
    "display_name", "account", "start_date", "end_date", "term_months", "contract_type",
    "status", "owner", "total_contract_value", "annual_contract_value", "monthly_amount",
)


def _crm_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


class ContractCreationService:
    """Turns a confirmed analysis into a CRM contract record."""

    def __init__(
        self,
        crm: AbstractCrmStore,
        enrichment: CrmEnrichmentService,
        config: PipelineConfig,
        gate: Optional[ValidationGate] = None,
    ):
        self.crm = crm
        self.enrichment = enrichment
        self.config = config
        self.gate = gate or ValidationGate(config)

    async def build_record(
        self,
        analysis: AnalysisResult,
        overrides: Optional[ContractOverrides] = None,
    ) -> Tuple[CreationRecord, List[str]]:
        """
        Merge extracted values, enrichment ids and overrides into a record.

        Returns:
            The record (keyed by CRM field name) and lookup warnings
        """
        overrides = overrides or ContractOverrides()
        fields = analysis.fields
        enrichment = analysis.enrichment
        warnings: List[str] = []

        values: Dict[str, Any] = {
            "display_name": fields.display_name,
            "account": enrichment.account_id,
            "start_date": fields.start_date,
            "end_date": fields.end_date,
            "term_months": fields.term_months,
            "contract_type": fields.contract_type.value,
            "status": self.config.default_status.value,
            "owner": enrichment.account_owner_id,
            "total_contract_value": fields.total_contract_value,
            "annual_contract_value": fields.annual_contract_value,
            "monthly_amount": fields.monthly_amount,
            "currency": fields.currency,
            "parent_product": fields.parent_product,
            "product_line": fields.product_line,
            "counterparty_signer": enrichment.counterparty_signer_id,
            "counterparty_signer_name": fields.counterparty_signer_name,
            "counterparty_signer_title": fields.counterparty_signer_title,
            "signature_date": fields.signature_date,
            "internal_signer": enrichment.internal_signer_id,
            "notes": fields.notes,
            "industry": enrichment.industry,
        }

        provided = overrides.provided()
        for name in (
            "display_name", "start_date", "end_date", "term_months", "total_contract_value",
            "annual_contract_value", "monthly_amount", "notes",
        ):
            if name in provided:
                values[name] = provided[name]
        if overrides.contract_type:
            values["contract_type"] = overrides.contract_type.value
        if overrides.status:
            values["status"] = overrides.status.value

        if overrides.end_date is None and (overrides.start_date or overrides.term_months):
            start, term = values["start_date"], values["term_months"]
            values["end_date"] = derive_end_date(start, term) if start and term else None

        if overrides.account_id:
            values["account"] = overrides.account_id
        elif overrides.counterparty_name:
            account = await self.enrichment.resolve_account(overrides.counterparty_name)
            if account.is_ok():
                record = account.unwrap()
                values["account"] = record.get("Id")
                values["owner"] = record.get("OwnerId")
                values["industry"] = record.get("Industry") or values["industry"]
            else:
                values["account"] = None
                warnings.append(str(account.unwrap_err()))

        if overrides.owner_id:
            values["owner"] = overrides.owner_id
        elif overrides.owner_name:
            owner = await self.enrichment.resolve_owner(overrides.owner_name)
            if owner.is_ok():
                values["owner"] = owner.unwrap().get("Id")
            else:
                warnings.append(str(owner.unwrap_err()))

        crm_fields = self.config.crm_fields
        record = CreationRecord(fields={crm_fields.api_name(k): _crm_value(v) for k, v in values.items()})
        return record, warnings

    async def _reverify(self, record: CreationRecord) -> Tuple[CreationRecord, List[str]]:
        """
        Check referenced ids still exist.

        Raises:
            CreationFailed: If the account or owner no longer exists
        """
        crm_fields = self.config.crm_fields
        warnings: List[str] = []

        for logical, object_type in (("account", "Account"), ("owner", "User")):
            record_id = record.get(crm_fields.api_name(logical))
            if not await self.enrichment.record_exists(object_type, record_id):
                qualifier = " as an active user" if object_type == "User" else ""
                raise CreationFailed(f"{self.config.label(logical)} {record_id} no longer exists in the CRM{qualifier}")

        for logical, object_type in (("counterparty_signer", "Contact"), ("internal_signer", "User")):
            api_name = crm_fields.api_name(logical)
            record_id = record.get(api_name)
            if record_id and not await self.enrichment.record_exists(object_type, record_id):
                warnings.append(f"Dropped stale {logical} reference {record_id}")
                record = record.without(api_name)
        return record, warnings

    async def _display_number(self, record_id: str, object_type: str) -> Optional[str]:
        expression = SearchExpression(object_type=object_type, fields=("Id", "ContractNumber"), limit=1).where("Id", record_id)
        try:
            records = await self.crm.search(expression)
        except Exception as e:
            logger.warning(f"Could not read back contract number for {record_id}: {e}")
            return None
        return records[0].get("ContractNumber") if records else None

    async def _attach(self, record_id: str, document: SourceDocument) -> Tuple[Optional[str], Optional[AttachmentFailed]]:
        try:
            result = await self.crm.attach(record_id, document.file_name, document.data)
        except Exception as e:
            return None, AttachmentFailed(record_id, f"{type(e).__name__}: {e}")
        if not result.success:
            return None, AttachmentFailed(record_id, result.error or "unknown error")
        return result.attachment_id, None

    def _summary(self, record: CreationRecord) -> List[str]:
        crm_fields = self.config.crm_fields
        summary = []
        for logical in SUMMARY_FIELDS:
            value = record.get(crm_fields.api_name(logical))
            if value is not None:
                summary.append(f"{self.config.label(logical)}: {value}")
        return summary

    async def create(
        self,
        analysis: AnalysisResult,
        document: SourceDocument,
        overrides: Optional[ContractOverrides] = None,
    ) -> Result[CreationOutcome, CreationOutcome]:
        """
        Create the contract and attach the document.

        Returns:
            Result[Ok, Err]: Ok with a successful outcome; Err with either a
            needs-confirmation outcome or a failure outcome
        """
        record, warnings = await self.build_record(analysis, overrides)

        try:
            self.gate.require(record)
        except ValidationFailed as e:
            return Err(CreationOutcome.awaiting_input(e.validation, warnings))

        try:
            record, stale = await self._reverify(record)
            warnings.extend(stale)
            logger.info(f"Creating {record.object_type} with {len(record.fields)} fields")
            created: CreateResult = await self.crm.create(record.object_type, record.fields)
            if not created.success or not created.id:
                raise CreationFailed("CRM rejected the contract", created.errors)
        except CreationFailed as e:
            logger.error(f"Creation failed: {e} {e.errors}")
            detail = f"{e}: {'; '.join(e.errors)}" if e.errors else str(e)
            return Err(CreationOutcome.failed(detail, warnings))
        except Exception as e:
            logger.exception(f"Unexpected error while creating contract: {e}")
            return Err(CreationOutcome.failed(f"{type(e).__name__}: {e}", warnings))

        display_number = await self._display_number(created.id, record.object_type)
        attachment_id, attach_error = await self._attach(created.id, document)
        if attach_error:
            logger.warning(str(attach_error))
            warnings.append(str(attach_error))

        outcome = CreationOutcome(
            success=True,
            record_id=created.id,
            display_number=display_number,
            record_url=self.crm.record_url(record.object_type, created.id),
            attachment_success=attach_error is None,
            attachment_id=attachment_id,
            attachment_error=attach_error.reason if attach_error else None,
            applied_field_summary=self._summary(record),
            warnings=warnings,
        )
        logger.info(f"Created contract {created.id} ({display_number})")
        return Ok(outcome)

    async def activate(self, record_id: str, object_type: str = "Contract") -> Result[CreateResult, str]:
        """Move a created record to Activated."""
        status_field = self.config.crm_fields.api_name("status")
        try:
            result = await self.crm.update(object_type, record_id, {status_field: ContractStatus.ACTIVATED.value})
        except Exception as e:
            logger.exception(f"Activation of {record_id} failed: {e}")
            return Err(f"{type(e).__name__}: {e}")
        if not result.success:
            return Err("; ".join(result.errors) or "CRM rejected the activation")
        logger.info(f"Activated {object_type} {record_id}")
        return Ok(result)
