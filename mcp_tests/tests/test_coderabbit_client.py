import json

import httpx
import pytest

from clients.coderabbit import CodeRabbitClient
from core.cache import TTLCache
from core.errors import EndpointUnavailableError, ExternalServiceError


def patch_coderabbit_transport(monkeypatch, client: CodeRabbitClient, handler):
    transport = httpx.MockTransport(handler)

    def _create_client():
        return httpx.AsyncClient(
            base_url=client._base_url,
            headers=client._headers,
            timeout=client._timeout,
            verify=client._verify,
            transport=transport,
        )

    monkeypatch.setattr(client, "_create_client", _create_client)


@pytest.fixture
def cache():
    c = TTLCache(sweep_interval_seconds=0)
    yield c
    c.destroy()


@pytest.mark.asyncio
async def test_generate_report_posts_payload(monkeypatch):
    client = CodeRabbitClient("key-123", api_url="https://cr.example/api/")
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"developers": [{"name": "ada", "prs": 3}]})

    patch_coderabbit_transport(monkeypatch, client, handler)

    report = await client.generate_report(from_date="2025-01-01", to_date="2025-01-31", group_by="author")

    assert report == {"developers": [{"name": "ada", "prs": 3}]}
    req = seen[0]
    assert req.method == "POST"
    assert str(req.url) == "https://cr.example/api/v1/report.generate"
    assert req.headers["x-coderabbitai-api-key"] == "key-123"
    # None-valued optional fields are not sent
    assert json.loads(req.content) == {"from": "2025-01-01", "to": "2025-01-31", "groupBy": "author"}


@pytest.mark.asyncio
async def test_generate_report_text_body(monkeypatch):
    client = CodeRabbitClient("k")
    patch_coderabbit_transport(monkeypatch, client, lambda r: httpx.Response(200, text="# Report\nall good"))

    assert await client.generate_report(from_date="2025-01-01", to_date="2025-01-02") == "# Report\nall good"


@pytest.mark.asyncio
async def test_generate_report_cached(monkeypatch, cache):
    client = CodeRabbitClient("k", cache=cache)
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"n": len(calls)})

    patch_coderabbit_transport(monkeypatch, client, handler)

    first = await client.generate_report(from_date="2025-01-01", to_date="2025-01-31")
    second = await client.generate_report(from_date="2025-01-01", to_date="2025-01-31")
    other = await client.generate_report(from_date="2025-02-01", to_date="2025-02-28")

    assert first == second == {"n": 1}
    assert other == {"n": 2}
    assert len(calls) == 2
    stats = cache.get_stats()
    assert (stats.hits, stats.misses) == (1, 2)


@pytest.mark.asyncio
async def test_generate_report_http_error(monkeypatch, cache):
    client = CodeRabbitClient("k", cache=cache)
    patch_coderabbit_transport(monkeypatch, client, lambda r: httpx.Response(401, json={"error": "bad key"}))

    with pytest.raises(ExternalServiceError, match="CodeRabbit returned an error"):
        await client.generate_report(from_date="2025-01-01", to_date="2025-01-31")

    # Failures are never cached
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_generate_report_network_error(monkeypatch):
    client = CodeRabbitClient("k")

    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    patch_coderabbit_transport(monkeypatch, client, handler)

    with pytest.raises(ExternalServiceError, match="Failed to call CodeRabbit"):
        await client.generate_report(from_date="2025-01-01", to_date="2025-01-31")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, hint",
    [
        ("trigger_review", "GitHub Pull Requests"),
        ("get_review_status", "CodeRabbit comments from PRs"),
        ("ask_coderabbit", "@coderabbitai"),
        ("get_review_history", "PR history"),
        ("configure_review", ".coderabbit.yaml"),
    ],
)
async def test_disabled_operations_raise(method, hint, caplog):
    client = CodeRabbitClient("k")

    with pytest.raises(EndpointUnavailableError) as ei:
        await getattr(client, method)(repository="o/r")

    assert str(ei.value).startswith("This endpoint is not available in the public API.")
    assert hint in str(ei.value)
    assert any("[DEPRECATED]" in rec.getMessage() for rec in caplog.records)
