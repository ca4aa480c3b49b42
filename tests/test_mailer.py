import json

import httpx
import pytest

from price_alerts.core.config import settings
from price_alerts.modules.notify.mailer import ResendMailer


@pytest.fixture
def mock_http(monkeypatch):
    """Route every httpx.AsyncClient through a MockTransport driven by `handler`."""
    real_client = httpx.AsyncClient
    state = {"requests": [], "handler": lambda request: httpx.Response(200, json={"id": "1"})}

    def transport_handler(request):
        state["requests"].append(request)
        return state["handler"](request)

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(transport_handler), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)
    return state


async def test_mailer_without_api_key_reports_failure(monkeypatch, mock_http):
    monkeypatch.setattr(settings, "RESEND_API_KEY", None)
    assert await ResendMailer().send_email("ann@example.com", "subject", "body") is False
    assert mock_http["requests"] == []


async def test_mailer_posts_to_resend(mock_http):
    mailer = ResendMailer(api_key="re_123", sender="alerts@example.com")

    assert await mailer.send_email("ann@example.com", "Stock Alert: AAPL", "body") is True

    request = mock_http["requests"][0]
    assert request.method == "POST"
    assert str(request.url) == settings.RESEND_API_URL
    assert request.headers["Authorization"] == "Bearer re_123"
    assert json.loads(request.content) == {
        "from": "alerts@example.com",
        "to": ["ann@example.com"],
        "subject": "Stock Alert: AAPL",
        "text": "body",
    }


async def test_mailer_http_error_reports_failure(mock_http):
    mock_http["handler"] = lambda request: httpx.Response(500)
    assert await ResendMailer(api_key="re_123").send_email("ann@example.com", "s", "b") is False
