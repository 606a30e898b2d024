"""
CRM enrichment service.

Resolves free-text names from the extracted fields to CRM identifiers:
- counterparty -> account (exact name, substring, suffix-stripped substring),
  candidates ranked with rapidfuzz
- counterparty signer -> contact scoped to the account
- internal signer -> internal signer directory -> active user
- owner name -> active user, falling back to the configured owner directory

Every lookup is best effort: failures become warnings, never errors.
"""

from typing import Any, Dict, List, Optional

from loguru import logger
from neopipe import Err, Ok, Result
from rapidfuzz import fuzz, process

from contractdesk.core.config import PipelineConfig
from contractdesk.core.errors import LookupFailed
from contractdesk.dbs.interfaces.crm_store import AbstractCrmStore, SearchExpression
from contractdesk.models.enrichment import EnrichmentResult
from contractdesk.models.fields import ExtractedFieldSet
from contractdesk.utils.company_names import strip_legal_suffix
from contractdesk.utils.fallback import AsyncStrategy, first_success_async

ACCOUNT_FIELDS = ("Id", "Name", "OwnerId", "Owner.Name", "Industry")
USER_FIELDS = ("Id", "Name", "IsActive")
CONTACT_FIELDS = ("Id", "Name", "Title")


def _owner_name(record: Dict[str, Any]) -> Optional[str]:
    owner = record.get("Owner")
    if isinstance(owner, dict):
        return owner.get("Name")
    return record.get("Owner.Name")


def rank_candidates(name: str, records: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Best match for ``name`` among CRM records by token-sort similarity."""
    if len(records) == 1:
        return records[0]
    choices = {i: record.get("Name") or "" for i, record in enumerate(records)}
    _, score, index = process.extractOne(name, choices, scorer=fuzz.token_sort_ratio)
    logger.debug(f"Ranked {len(records)} candidates for {name!r}; best score {score:.0f}")
    return records[index]


class CrmEnrichmentService:
    """Looks up account, contact and user ids for an analysis."""

    def __init__(self, crm: AbstractCrmStore, config: PipelineConfig):
        self.crm = crm
        self.config = config

    async def _search(self, expression: SearchExpression) -> Optional[List[Dict[str, Any]]]:
        records = await self.crm.search(expression)
        return records or None

    async def resolve_account(self, name: str) -> Result[Dict[str, Any], LookupFailed]:
        """
        Find the account for a counterparty name.

        Returns:
            Result[Ok, Err]: Ok with the best account record, Err with LookupFailed
        """
        base = SearchExpression(object_type="Account", fields=ACCOUNT_FIELDS, limit=10)
        stripped = strip_legal_suffix(name)
        strategies = [
            AsyncStrategy("exact_name", lambda: self._search(base.where("Name", name))),
            AsyncStrategy("name_contains", lambda: self._search(base.where("Name", name, "like"))),
            AsyncStrategy("stripped_name_contains", lambda: self._search(base.where("Name", stripped, "like"))),
        ]
        result = await first_success_async(strategies, label="account_lookup")
        if result.is_err():
            reasons = "; ".join(f"{f.name}: {f.reason}" for f in result.unwrap_err())
            return Err(LookupFailed("account", name, reasons))
        success = result.unwrap()
        account = rank_candidates(name, success.value)
        logger.info(f"Resolved account {name!r} -> {account.get('Id')} via {success.name}")
        return Ok(account)

    async def resolve_user(self, name: str) -> Result[Dict[str, Any], LookupFailed]:
        """Find an active CRM user by name."""
        base = SearchExpression(object_type="User", fields=USER_FIELDS, limit=5).where("IsActive", True)
        try:
            records = await self.crm.search(base.where("Name", name)) or await self.crm.search(
                base.where("Name", name, "like")
            )
        except Exception as e:
            return Err(LookupFailed("user", name, f"{type(e).__name__}: {e}"))
        if not records:
            return Err(LookupFailed("user", name, "no active user matched"))
        return Ok(rank_candidates(name, records))

    async def resolve_owner(self, name: str) -> Result[Dict[str, Any], LookupFailed]:
        """Active CRM user, else the configured owner directory."""
        user = await self.resolve_user(name)
        if user.is_ok():
            return user
        for owner_name, owner_id in self.config.owner_directory.items():
            if owner_name.lower() == name.strip().lower():
                logger.info(f"Owner {name!r} resolved from the owner directory")
                return Ok({"Id": owner_id, "Name": owner_name})
        return user

    async def resolve_contact(self, account_id: str, name: str) -> Result[Dict[str, Any], LookupFailed]:
        expression = (
            SearchExpression(object_type="Contact", fields=CONTACT_FIELDS, limit=5)
            .where("AccountId", account_id)
            .where("Name", name, "like")
        )
        try:
            records = await self.crm.search(expression)
        except Exception as e:
            return Err(LookupFailed("contact", name, f"{type(e).__name__}: {e}"))
        if not records:
            return Err(LookupFailed("contact", name, f"no contact on account {account_id}"))
        return Ok(rank_candidates(name, records))

    async def resolve_internal_signer(self, name: str) -> Result[Dict[str, Any], LookupFailed]:
        signer = self.config.internal_signer_for(name)
        if signer is None:
            return Err(LookupFailed("internal_signer", name, "not in the internal signer directory"))
        return await self.resolve_user(signer.lookup_name)

    async def record_exists(self, object_type: str, record_id: str) -> bool:
        """Whether ``record_id`` exists; users must also be active."""
        expression = SearchExpression(object_type=object_type, fields=("Id",), limit=1).where("Id", record_id)
        if object_type == "User":
            expression = expression.where("IsActive", True)
        return bool(await self.crm.search(expression))

    async def enrich(self, fields: ExtractedFieldSet) -> EnrichmentResult:
        """Resolve every CRM identifier the fields allow. Never raises."""
        result = EnrichmentResult()
        warnings: List[str] = []

        if fields.counterparty_name:
            account = await self.resolve_account(fields.counterparty_name)
            if account.is_ok():
                record = account.unwrap()
                result.account_id = record.get("Id")
                result.account_name = record.get("Name")
                result.account_owner_id = record.get("OwnerId")
                result.account_owner_name = _owner_name(record)
                result.industry = record.get("Industry")
            else:
                warnings.append(str(account.unwrap_err()))
        else:
            warnings.append("No counterparty name to look up")

        if fields.counterparty_signer_name and result.account_id:
            contact = await self.resolve_contact(result.account_id, fields.counterparty_signer_name)
            if contact.is_ok():
                result.counterparty_signer_id = contact.unwrap().get("Id")
                result.counterparty_signer_name = contact.unwrap().get("Name")
            else:
                warnings.append(str(contact.unwrap_err()))

        if fields.internal_signer_name:
            user = await self.resolve_internal_signer(fields.internal_signer_name)
            if user.is_ok():
                result.internal_signer_id = user.unwrap().get("Id")
                result.internal_signer_name = user.unwrap().get("Name")
            else:
                warnings.append(str(user.unwrap_err()))

        result.warnings = warnings
        for warning in warnings:
            logger.warning(f"Enrichment: {warning}")
        return result
