"""Tests for the receipt parsing HTTP function."""

import json
import sys
from unittest.mock import MagicMock, patch

from starlette.testclient import TestClient

from carbonsnap.config import load_config
from carbonsnap.receipt import today_iso
from carbonsnap.server import CORS_HEADERS, create_app
from carbonsnap.vision import ReceiptVisionBackend, UpstreamAPIError
from carbonsnap.vision.gpt import GPTReceiptBackend

IMAGE = "data:image/jpeg;base64,/9j/4AAQ"


class StubBackend(ReceiptVisionBackend):
    name = "stub"

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error

    async def extract_receipt(self, image_data: str) -> str:
        if self.error is not None:
            raise self.error
        return self.reply


def _client(backend: ReceiptVisionBackend) -> TestClient:
    return TestClient(create_app(backend=backend))


def _assert_cors(response) -> None:
    for key, value in CORS_HEADERS.items():
        assert response.headers[key] == value


def _assert_fallback(payload: dict) -> None:
    assert payload["storeName"] == "Unknown Store"
    assert payload["date"] == today_iso()
    assert payload["items"] == []
    assert payload["total"] == 0
    assert payload["confidence"] == 0
    assert payload["error"]


def test_success_returns_sanitized_receipt():
    reply = json.dumps({
        "storeName": "Trader Joe's",
        "date": "2024-03-15",
        "items": [
            {"name": " Milk ", "price": 3.5},
            {"name": "Eggs", "price": 4, "category": "bogus"},
        ],
        "total": 0,
        "confidence": 0.9,
    })
    resp = _client(StubBackend(reply)).post("/ai-receipt-parser", json={"imageData": IMAGE})

    assert resp.status_code == 200
    _assert_cors(resp)
    assert resp.headers["content-type"].startswith("application/json")
    payload = resp.json()
    assert payload == {
        "storeName": "Trader Joe's",
        "date": "2024-03-15",
        "items": [
            {"name": "Milk", "quantity": "1", "price": 3.5, "category": "other"},
            {"name": "Eggs", "quantity": "1", "price": 4.0, "category": "other"},
        ],
        "subtotal": None,
        "tax": None,
        "total": 7.5,
        "confidence": 0.9,
    }


def test_preflight_returns_headers_without_body():
    backend = StubBackend(error=AssertionError("must not be called"))
    resp = _client(backend).options("/ai-receipt-parser")

    assert resp.status_code == 200
    assert resp.content == b""
    _assert_cors(resp)


def test_malformed_ai_reply_returns_fallback():
    resp = _client(StubBackend("not json")).post(
        "/ai-receipt-parser", json={"imageData": IMAGE}
    )
    assert resp.status_code == 500
    _assert_cors(resp)
    payload = resp.json()
    _assert_fallback(payload)
    assert payload["error"] == "Invalid AI response format"


def test_upstream_error_returns_fallback():
    backend = StubBackend(error=UpstreamAPIError("OpenAI", 502))
    resp = _client(backend).post("/ai-receipt-parser", json={"imageData": IMAGE})

    assert resp.status_code == 500
    payload = resp.json()
    _assert_fallback(payload)
    assert payload["error"] == "OpenAI API error: 502"


def test_missing_api_key_returns_fallback_without_outbound_call():
    mock_openai = MagicMock()
    with patch.dict(sys.modules, {"openai": mock_openai}):
        resp = _client(GPTReceiptBackend(api_key="")).post(
            "/ai-receipt-parser", json={"imageData": IMAGE}
        )

    assert resp.status_code == 500
    _assert_fallback(resp.json())
    assert "API key" in resp.json()["error"]
    mock_openai.AsyncOpenAI.assert_not_called()


def test_missing_image_data_returns_fallback():
    resp = _client(StubBackend("{}")).post("/ai-receipt-parser", json={})
    assert resp.status_code == 500
    assert resp.json()["error"] == "imageData is required"


def test_invalid_request_body_returns_fallback():
    resp = _client(StubBackend("{}")).post(
        "/ai-receipt-parser",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 500
    _assert_fallback(resp.json())


def test_health_reports_backend():
    resp = _client(StubBackend()).get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "backend": "stub"}


def test_create_app_from_config():
    config = load_config()
    config.ai.backend = "claude"
    resp = TestClient(create_app(config)).get("/health")
    assert resp.json()["backend"] == "claude"
