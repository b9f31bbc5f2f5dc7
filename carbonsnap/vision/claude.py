"""Claude API vision backend for receipt extraction."""

from __future__ import annotations

import base64
import logging

from . import ReceiptFormatError, ReceiptVisionBackend, UpstreamAPIError, parse_data_url
from .prompt import SYSTEM_PROMPT, USER_INSTRUCTION

logger = logging.getLogger(__name__)


class ClaudeReceiptBackend(ReceiptVisionBackend):
    """Extract receipt data using Claude's vision capability."""

    name = "claude"

    def __init__(
        self,
        api_key: str = "",
        model: str = "claude-sonnet-4-5-20250929",
        max_tokens: int = 2000,
        temperature: float = 0.1,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def extract_receipt(self, image_data: str) -> str:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key not configured. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content: list[dict] = [
            _image_block(image_data),
            {"type": "text", "text": USER_INSTRUCTION},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key, max_retries=0)
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIStatusError as e:
            logger.error("Anthropic API error: %s %s", e.status_code, e.message)
            raise UpstreamAPIError("Anthropic", e.status_code) from e

        if not response.content:
            raise ReceiptFormatError("Invalid AI response format")
        text = response.content[0].text
        logger.debug("AI response: %s", text)
        return text


def _image_block(image_data: str) -> dict:
    """Build an image content block from a data URL or a plain URL."""
    decoded = parse_data_url(image_data)
    if decoded is None:
        return {"type": "image", "source": {"type": "url", "url": image_data}}

    media_type, data = decoded
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": media_type,
            "data": base64.standard_b64encode(data).decode(),
        },
    }
