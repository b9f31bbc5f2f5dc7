"""Tests for vision backends (mocked API calls)."""

import base64
import json
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from carbonsnap.config import load_config
from carbonsnap.vision import (
    ReceiptFormatError,
    ReceiptVisionBackend,
    UpstreamAPIError,
    create_backend,
    parse_data_url,
    parse_reply,
)
from carbonsnap.vision.claude import ClaudeReceiptBackend, _image_block
from carbonsnap.vision.gemini import GeminiReceiptBackend
from carbonsnap.vision.gpt import GPTReceiptBackend
from carbonsnap.vision.prompt import SYSTEM_PROMPT, USER_INSTRUCTION

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"
DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

REPLY = json.dumps({
    "storeName": "Corner Shop",
    "date": "2024-03-15",
    "items": [{"name": "Milk", "quantity": "1", "price": 1.99, "category": "food"}],
    "subtotal": None,
    "tax": None,
    "total": 1.99,
    "confidence": 0.9,
})


class FakeStatusError(Exception):
    def __init__(self, status_code: int, message: str = "boom") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class TestCreateBackend:
    def test_default_is_openai(self):
        backend = create_backend(load_config())
        assert isinstance(backend, GPTReceiptBackend)
        assert backend.name == "openai"

    def test_create_claude_backend(self):
        config = load_config()
        config.ai.backend = "claude"
        assert isinstance(create_backend(config), ClaudeReceiptBackend)

    def test_create_gemini_backend(self):
        config = load_config()
        config.ai.backend = "gemini"
        assert isinstance(create_backend(config), GeminiReceiptBackend)

    def test_create_unknown_backend(self):
        config = load_config()
        config.ai.backend = "unknown"
        with pytest.raises(ValueError, match="Unknown vision backend"):
            create_backend(config)

    def test_backends_implement_interface(self):
        for cls in (GPTReceiptBackend, ClaudeReceiptBackend, GeminiReceiptBackend):
            assert issubclass(cls, ReceiptVisionBackend)


class TestParseReply:
    def test_plain_json(self):
        assert parse_reply(REPLY)["storeName"] == "Corner Shop"

    def test_markdown_fences(self):
        text = "```json\n" + REPLY + "\n```"
        assert parse_reply(text)["total"] == 1.99

    def test_not_json(self):
        with pytest.raises(ReceiptFormatError, match="Invalid AI response format"):
            parse_reply("not json")

    def test_truncated_json_is_rejected(self):
        with pytest.raises(ReceiptFormatError):
            parse_reply(REPLY[:40])


class TestParseDataUrl:
    def test_decodes_data_url(self):
        assert parse_data_url(DATA_URL) == ("image/png", PNG_BYTES)

    def test_missing_mime_defaults_to_jpeg(self):
        url = "data:;base64," + base64.b64encode(b"abc").decode()
        assert parse_data_url(url) == ("image/jpeg", b"abc")

    def test_plain_url_is_none(self):
        assert parse_data_url("https://example.com/receipt.jpg") is None


class TestGPTReceiptBackend:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        mock_openai = MagicMock()
        with patch.dict(sys.modules, {"openai": mock_openai}):
            backend = GPTReceiptBackend(api_key="")
            with pytest.raises(ValueError, match="API key"):
                await backend.extract_receipt(DATA_URL)
        mock_openai.AsyncOpenAI.assert_not_called()

    @pytest.mark.asyncio
    async def test_extract_receipt_mocked(self):
        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content=REPLY))]

        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)

        mock_openai = MagicMock()
        mock_openai.AsyncOpenAI.return_value = mock_client

        with patch.dict(sys.modules, {"openai": mock_openai}):
            backend = GPTReceiptBackend(api_key="test-key")
            text = await backend.extract_receipt(DATA_URL)

        assert text == REPLY
        mock_openai.AsyncOpenAI.assert_called_once_with(api_key="test-key", max_retries=0)
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 2000
        assert kwargs["temperature"] == 0.1
        system, user = kwargs["messages"]
        assert system == {"role": "system", "content": SYSTEM_PROMPT}
        assert user["content"][0] == {"type": "text", "text": USER_INSTRUCTION}
        assert user["content"][1]["image_url"]["url"] == DATA_URL

    @pytest.mark.asyncio
    async def test_api_error_status(self):
        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(side_effect=FakeStatusError(429))

        mock_openai = MagicMock()
        mock_openai.AsyncOpenAI.return_value = mock_client
        mock_openai.APIStatusError = FakeStatusError

        with patch.dict(sys.modules, {"openai": mock_openai}):
            backend = GPTReceiptBackend(api_key="test-key")
            with pytest.raises(UpstreamAPIError, match="OpenAI API error: 429") as exc_info:
                await backend.extract_receipt(DATA_URL)
        assert exc_info.value.status == 429

    @pytest.mark.asyncio
    async def test_empty_reply(self):
        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content=None))]
        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)
        mock_openai = MagicMock()
        mock_openai.AsyncOpenAI.return_value = mock_client

        with patch.dict(sys.modules, {"openai": mock_openai}):
            backend = GPTReceiptBackend(api_key="test-key")
            with pytest.raises(ReceiptFormatError):
                await backend.extract_receipt(DATA_URL)


class TestClaudeReceiptBackend:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        backend = ClaudeReceiptBackend(api_key="")
        with pytest.raises(ValueError, match="API key"):
            await backend.extract_receipt(DATA_URL)

    @pytest.mark.asyncio
    async def test_extract_receipt_mocked(self):
        mock_response = MagicMock()
        mock_response.content = [MagicMock(text=REPLY)]

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            backend = ClaudeReceiptBackend(api_key="test-key")
            text = await backend.extract_receipt(DATA_URL)

        assert text == REPLY
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["system"] == SYSTEM_PROMPT
        image = kwargs["messages"][0]["content"][0]
        assert image["source"]["media_type"] == "image/png"

    def test_image_block_for_plain_url(self):
        block = _image_block("https://example.com/r.jpg")
        assert block == {
            "type": "image",
            "source": {"type": "url", "url": "https://example.com/r.jpg"},
        }

    def test_image_block_for_data_url(self):
        block = _image_block(DATA_URL)
        assert block["source"]["type"] == "base64"
        assert base64.b64decode(block["source"]["data"]) == PNG_BYTES


class FakeGoogleAPIError(Exception):
    def __init__(self, code: int, message: str = "boom") -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _gemini_modules(mock_genai: MagicMock) -> dict:
    mock_google = MagicMock()
    mock_google.generativeai = mock_genai
    mock_exceptions = MagicMock()
    mock_exceptions.GoogleAPICallError = FakeGoogleAPIError
    mock_api_core = MagicMock()
    mock_api_core.exceptions = mock_exceptions
    return {
        "google": mock_google,
        "google.generativeai": mock_genai,
        "google.api_core": mock_api_core,
        "google.api_core.exceptions": mock_exceptions,
    }


class TestGeminiReceiptBackend:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        backend = GeminiReceiptBackend(api_key="")
        with pytest.raises(ValueError, match="API key"):
            await backend.extract_receipt(DATA_URL)

    @pytest.mark.asyncio
    async def test_requires_data_url(self):
        backend = GeminiReceiptBackend(api_key="test-key")
        with pytest.raises(ValueError, match="data URL"):
            await backend.extract_receipt("https://example.com/r.jpg")

    @pytest.mark.asyncio
    async def test_extract_receipt_mocked(self):
        mock_model = MagicMock()
        mock_model.generate_content_async = AsyncMock(return_value=MagicMock(text=REPLY))

        mock_genai = MagicMock()
        mock_genai.GenerativeModel.return_value = mock_model

        with patch.dict(sys.modules, _gemini_modules(mock_genai)):
            backend = GeminiReceiptBackend(api_key="test-key")
            text = await backend.extract_receipt(DATA_URL)

        assert text == REPLY
        mock_genai.configure.assert_called_once_with(api_key="test-key")
        parts = mock_model.generate_content_async.call_args.args[0]
        assert parts[1] == {"mime_type": "image/png", "data": PNG_BYTES}

    @pytest.mark.asyncio
    async def test_api_error_status(self):
        mock_model = MagicMock()
        mock_model.generate_content_async = AsyncMock(side_effect=FakeGoogleAPIError(503))

        mock_genai = MagicMock()
        mock_genai.GenerativeModel.return_value = mock_model

        with patch.dict(sys.modules, _gemini_modules(mock_genai)):
            backend = GeminiReceiptBackend(api_key="test-key")
            with pytest.raises(UpstreamAPIError, match="Gemini API error: 503") as exc_info:
                await backend.extract_receipt(DATA_URL)
        assert exc_info.value.provider == "Gemini"
        assert exc_info.value.status == 503
