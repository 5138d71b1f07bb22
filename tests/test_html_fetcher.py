import httpx
import pytest

from mealman.app.services.media.html_fetcher import FetchOutcome, fetch_html


def _transport(status=200, content=b"<html><body><p>hi</p></body></html>", content_type="text/html"):
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["User-Agent"] == "Mozilla/5.0 (compatible; MealmanBot/1.0)"
        return httpx.Response(status, headers={"content-type": content_type}, content=content)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_ok_page(settings):
    result = await fetch_html("https://example.com", settings, transport=_transport())
    assert result.ok
    assert result.status_code == 200
    assert "<p>hi</p>" in result.html


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403, 429, 503])
async def test_blocking_statuses_need_browser(settings, status):
    result = await fetch_html("https://example.com", settings, transport=_transport(status=status))
    assert result.outcome == FetchOutcome.NEEDS_BROWSER
    assert result.status_code == status


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [404, 410, 500])
async def test_other_errors_fail(settings, status):
    result = await fetch_html("https://example.com", settings, transport=_transport(status=status))
    assert result.outcome == FetchOutcome.FAILED
    assert str(status) in result.reason


@pytest.mark.asyncio
async def test_non_html_content_fails(settings):
    result = await fetch_html(
        "https://example.com/photo.jpg",
        settings,
        transport=_transport(content=b"\xff\xd8\xff", content_type="image/jpeg"),
    )
    assert result.outcome == FetchOutcome.FAILED
    assert "image/jpeg" in result.reason


@pytest.mark.asyncio
async def test_binary_payload_needs_browser(settings):
    result = await fetch_html(
        "https://example.com",
        settings,
        transport=_transport(content=bytes(range(0, 32)) * 20),
    )
    assert result.outcome == FetchOutcome.NEEDS_BROWSER


@pytest.mark.asyncio
async def test_charset_from_content_type(settings):
    body = "<html><body>Crème brûlée</body></html>".encode("latin-1")
    result = await fetch_html(
        "https://example.com",
        settings,
        transport=_transport(content=body, content_type="text/html; charset=ISO-8859-1"),
    )
    assert "Crème brûlée" in result.html


@pytest.mark.asyncio
async def test_url_rejected_by_client_fails(settings):
    result = await fetch_html("http://exa\x01mple.com/", settings, transport=_transport())
    assert result.outcome == FetchOutcome.FAILED
    assert result.reason.startswith("Invalid URL")
