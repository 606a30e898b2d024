"""
Salesforce CRM Adapter

Implements AbstractCrmStore over the Salesforce REST API with httpx.
- search renders a SearchExpression to SOQL and is retried with tenacity on
  transport errors and 5xx/429 responses
- create, update and attach are never retried; a failed write is reported
  back with the raw Salesforce error messages
- attachments are uploaded as ContentVersion records published to the
  contract
"""

import base64
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from contractdesk.dbs.interfaces.crm_store import AbstractCrmStore, Condition, SearchExpression
from contractdesk.models.creation import AttachResult, CreateResult
from contractdesk.utils.settings.core import SalesforceSettings

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def soql_literal(value: Any) -> str:
    """Render a Python value as a SOQL literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _like_literal(value: Any) -> str:
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'").replace("%", "\\%").replace("_", "\\_")
    return f"'%{escaped}%'"


def _render_condition(condition: Condition) -> str:
    if condition.operator == "like":
        return f"{condition.field} LIKE {_like_literal(condition.value)}"
    return f"{condition.field} {condition.operator} {soql_literal(condition.value)}"


def to_soql(expression: SearchExpression) -> str:
    query = f"SELECT {', '.join(expression.fields)} FROM {expression.object_type}"
    if expression.conditions:
        query += " WHERE " + " AND ".join(_render_condition(c) for c in expression.conditions)
    return f"{query} LIMIT {expression.limit}"


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, httpx.TransportError)


def _error_messages(response: httpx.Response) -> List[str]:
    try:
        payload = response.json()
    except ValueError:
        return [response.text or f"HTTP {response.status_code}"]
    if isinstance(payload, list):
        return [f"{e.get('errorCode', 'ERROR')}: {e.get('message', '')}" for e in payload]
    if isinstance(payload, dict) and payload.get("errors"):
        return [str(e) for e in payload["errors"]]
    return [f"HTTP {response.status_code}"]


class SalesforceCrmAdapter(AbstractCrmStore):
    """Salesforce REST implementation of the CRM store."""

    def __init__(
        self,
        settings: SalesforceSettings,
        client: Optional[httpx.AsyncClient] = None,
        retry_wait: Any = None,
    ) -> None:
        if not settings.access_token:
            logger.warning("SF_ACCESS_TOKEN is not set; CRM calls will be rejected")
        self.settings = settings
        self.client = client or httpx.AsyncClient(timeout=settings.timeout_seconds)
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=4)

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.settings.access_token or ''}"}

    async def _read(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_read_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logger.level("WARNING").no),
            reraise=True,
        ):
            with attempt:
                response = await self.client.get(url, params=params, headers=self._headers)
                response.raise_for_status()
                return response.json()
        raise RuntimeError("unreachable")

    async def search(self, expression: SearchExpression) -> List[Dict[str, Any]]:
        soql = to_soql(expression)
        logger.debug(f"SOQL: {soql}")
        payload = await self._read(f"{self.settings.data_url}/query", params={"q": soql})
        records = payload.get("records", [])
        for record in records:
            record.pop("attributes", None)
        return records

    async def create(self, object_type: str, fields: Dict[str, Any]) -> CreateResult:
        response = await self.client.post(
            f"{self.settings.data_url}/sobjects/{object_type}/",
            json=fields,
            headers=self._headers,
        )
        if response.status_code >= 400:
            errors = _error_messages(response)
            logger.error(f"Create {object_type} rejected: {errors}")
            return CreateResult(success=False, errors=errors)
        payload = response.json()
        return CreateResult(
            id=payload.get("id"),
            success=bool(payload.get("success", True)),
            errors=[str(e) for e in payload.get("errors", [])],
        )

    async def update(self, object_type: str, record_id: str, fields: Dict[str, Any]) -> CreateResult:
        response = await self.client.patch(
            f"{self.settings.data_url}/sobjects/{object_type}/{record_id}",
            json=fields,
            headers=self._headers,
        )
        if response.status_code >= 400:
            errors = _error_messages(response)
            logger.error(f"Update {object_type} {record_id} rejected: {errors}")
            return CreateResult(id=record_id, success=False, errors=errors)
        return CreateResult(id=record_id, success=True)

    async def attach(self, record_id: str, file_name: str, data: bytes) -> AttachResult:
        body = {
            "Title": file_name.rsplit(".", 1)[0],
            "PathOnClient": file_name,
            "VersionData": base64.b64encode(data).decode("ascii"),
            "FirstPublishLocationId": record_id,
        }
        try:
            response = await self.client.post(
                f"{self.settings.data_url}/sobjects/ContentVersion/",
                json=body,
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            return AttachResult(success=False, error=f"{type(e).__name__}: {e}")
        if response.status_code >= 400:
            return AttachResult(success=False, error="; ".join(_error_messages(response)))
        return AttachResult(success=True, attachment_id=response.json().get("id"))

    def record_url(self, object_type: str, record_id: str) -> Optional[str]:
        return self.settings.record_url(object_type, record_id)

    async def aclose(self) -> None:
        await self.client.aclose()
