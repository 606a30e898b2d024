"""Retrieval cascade over the Slack client with httpx.MockTransport."""

import httpx
import pytest

from contractdesk.core.errors import RetrievalFailed
from contractdesk.core.retrieval.retriever import DocumentRetriever, sniff_rejection
from contractdesk.core.retrieval.transport import FetchedPayload
from contractdesk.integrations.slack.file_client import SlackFileClient
from contractdesk.models.document import SourceFile
from contractdesk.utils.settings.core import SlackSettings

PDF_BYTES = b"%PDF-1.4\n" + b"0" * 500
LOGIN_PAGE = b"<!DOCTYPE html><html><body>Please sign in</body></html>" + b" " * 200

FILE = SourceFile(
    id="F123",
    name="order.pdf",
    size=len(PDF_BYTES),
    mimetype="application/pdf",
    url_private="https://files.example/F123/order.pdf",
    url_private_download="https://files.example/F123/download/order.pdf",
)


def make_retriever(handler) -> DocumentRetriever:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    slack = SlackFileClient(
        SlackSettings(bot_token="xoxb-test", api_base_url="https://slack.example/api"),
        client=client,
    )
    return DocumentRetriever(slack, min_bytes=100, timeout=5)


def test_sniff_rejects_small_and_html_payloads():
    assert sniff_rejection(FetchedPayload(b"tiny"), 100) is not None
    assert sniff_rejection(FetchedPayload(LOGIN_PAGE, "text/html; charset=utf-8"), 100) == "received HTML content type"
    assert sniff_rejection(FetchedPayload(LOGIN_PAGE, "application/octet-stream"), 100) == "received HTML body"
    assert sniff_rejection(FetchedPayload(PDF_BYTES, "application/pdf"), 100) is None


async def test_api_metadata_strategy_downloads_the_file():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/api/files.info":
            return httpx.Response(200, json={"ok": True, "file": {"url_private_download": FILE.url_private_download}})
        assert request.headers["Authorization"] == "Bearer xoxb-test"
        return httpx.Response(200, content=PDF_BYTES, headers={"content-type": "application/pdf"})

    document = await make_retriever(handler).retrieve(FILE)

    assert document.data == PDF_BYTES
    assert document.file_name == "order.pdf"
    assert len(requests) == 2


async def test_html_login_page_falls_through_to_public_link():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/files.info":
            return httpx.Response(200, json={"ok": False, "error": "missing_scope"})
        if request.url.path == "/api/files.sharedPublicURL":
            return httpx.Response(200, json={"ok": True, "file": {"permalink_public": "https://slack-files.example/T1-F123-abc123"}})
        if request.url.params.get("pub_secret") == "abc123":
            return httpx.Response(200, content=PDF_BYTES, headers={"content-type": "application/pdf"})
        return httpx.Response(200, content=LOGIN_PAGE, headers={"content-type": "text/html"})

    document = await make_retriever(handler).retrieve(FILE)

    assert document.data == PDF_BYTES


async def test_protocol_fetch_follows_redirects_hop_by_hop():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith("/api/"):
            return httpx.Response(200, json={"ok": False, "error": "not_allowed"})
        if request.url.path == "/F123/download/order.pdf":
            return httpx.Response(302, headers={"location": "/cdn/order.pdf"})
        if request.url.path == "/cdn/order.pdf":
            return httpx.Response(200, content=PDF_BYTES)
        return httpx.Response(404)

    retriever = make_retriever(handler)
    # direct_fetch would follow the redirect itself
    retriever.strategies = [s for s in retriever.strategies if s.name != "direct_fetch"]

    document = await retriever.retrieve(FILE)

    assert document.data == PDF_BYTES


async def test_exhaustion_raises_retrieval_failed_with_every_attempt():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith("/api/"):
            return httpx.Response(200, json={"ok": False, "error": "file_not_found"})
        return httpx.Response(403)

    with pytest.raises(RetrievalFailed) as excinfo:
        await make_retriever(handler).retrieve(FILE)

    assert [a.name for a in excinfo.value.attempts] == [
        "api_metadata", "direct_fetch", "protocol_fetch", "public_link",
    ]
    assert excinfo.value.to_dict()["error"] == "RetrievalFailed"
