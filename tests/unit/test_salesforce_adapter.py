"""Salesforce REST adapter over httpx.MockTransport."""

import json

import httpx
import pytest
from tenacity import wait_none

from contractdesk.dbs.adapters.salesforce_crm_adapter import SalesforceCrmAdapter, soql_literal, to_soql
from contractdesk.dbs.interfaces.crm_store import SearchExpression
from contractdesk.utils.settings.core import SalesforceSettings

SETTINGS = SalesforceSettings(instance_url="https://sf.example", access_token="token", api_version="58.0")


def make_adapter(handler) -> SalesforceCrmAdapter:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SalesforceCrmAdapter(SETTINGS, client=client, retry_wait=wait_none())


def test_soql_rendering_escapes_literals():
    expression = (
        SearchExpression(object_type="Account", fields=("Id", "Name"), limit=5)
        .where("Name", "O'Brien 100%_", "like")
        .where("IsActive", True)
    )

    assert to_soql(expression) == (
        "SELECT Id, Name FROM Account WHERE Name LIKE '%O\\'Brien 100\\%\\_%' AND IsActive = true LIMIT 5"
    )
    assert soql_literal(None) == "null"
    assert soql_literal(36) == "36"
    assert soql_literal("a\\b") == "'a\\\\b'"


async def test_search_retries_transient_errors():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"records": [{"attributes": {"type": "Account"}, "Id": "001A", "Name": "Acme"}]})

    records = await make_adapter(handler).search(SearchExpression(object_type="Account").where("Name", "Acme"))

    assert records == [{"Id": "001A", "Name": "Acme"}]
    assert len(calls) == 3
    assert calls[-1].url.params["q"] == "SELECT Id, Name FROM Account WHERE Name = 'Acme' LIMIT 10"
    assert calls[-1].headers["Authorization"] == "Bearer token"


async def test_search_gives_up_after_max_attempts():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500)

    with pytest.raises(httpx.HTTPStatusError):
        await make_adapter(handler).search(SearchExpression(object_type="Account"))

    assert len(calls) == SETTINGS.max_read_attempts


async def test_client_errors_are_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(400, json=[{"errorCode": "MALFORMED_QUERY", "message": "bad"}])

    with pytest.raises(httpx.HTTPStatusError):
        await make_adapter(handler).search(SearchExpression(object_type="Account"))

    assert len(calls) == 1


async def test_create_posts_fields_once():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(201, json={"id": "800A", "success": True, "errors": []})

    result = await make_adapter(handler).create("Contract", {"AccountId": "001A", "Status": "Draft"})

    assert result.success
    assert result.id == "800A"
    assert calls[0].method == "POST"
    assert calls[0].url.path == "/services/data/v58.0/sobjects/Contract/"
    assert json.loads(calls[0].content) == {"AccountId": "001A", "Status": "Draft"}


async def test_create_failure_is_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, json=[{"errorCode": "SERVER_UNAVAILABLE", "message": "try later"}])

    result = await make_adapter(handler).create("Contract", {"Status": "Draft"})

    assert not result.success
    assert result.errors == ["SERVER_UNAVAILABLE: try later"]
    assert len(calls) == 1


async def test_update_and_attach():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.method == "PATCH":
            return httpx.Response(204)
        return httpx.Response(201, json={"id": "068A", "success": True})

    adapter = make_adapter(handler)
    updated = await adapter.update("Contract", "800A", {"Status": "Activated"})
    attached = await adapter.attach("800A", "acme-msa.pdf", b"%PDF-1.4")

    assert updated.success
    assert calls[0].url.path == "/services/data/v58.0/sobjects/Contract/800A"
    assert attached.attachment_id == "068A"
    body = json.loads(calls[1].content)
    assert body["FirstPublishLocationId"] == "800A"
    assert body["Title"] == "acme-msa"
    assert body["PathOnClient"] == "acme-msa.pdf"


async def test_attach_error_is_reported():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json=[{"errorCode": "STORAGE_LIMIT_EXCEEDED", "message": "full"}])

    attached = await make_adapter(handler).attach("800A", "acme-msa.pdf", b"%PDF-1.4")

    assert not attached.success
    assert attached.error == "STORAGE_LIMIT_EXCEEDED: full"


def test_record_url():
    adapter = SalesforceCrmAdapter(SETTINGS, client=httpx.AsyncClient())

    assert adapter.record_url("Contract", "800A") == "https://sf.example/lightning/r/Contract/800A/view"
