"""OpenAI chat-completions backend for receipt extraction."""

from __future__ import annotations

import logging

from . import ReceiptFormatError, ReceiptVisionBackend, UpstreamAPIError
from .prompt import SYSTEM_PROMPT, USER_INSTRUCTION

logger = logging.getLogger(__name__)


class GPTReceiptBackend(ReceiptVisionBackend):
    """Extract receipt data using an OpenAI multimodal chat model."""

    name = "openai"

    def __init__(
        self,
        api_key: str = "",
        model: str = "gpt-4o-mini",
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
                "OpenAI API key not configured. "
                "Check the config file or the OPENAI_API_KEY environment variable."
            )

        try:
            import openai
        except ImportError:
            raise ImportError("openai SDK is required: pip install openai") from None

        # One call per request: the SDK's own retry loop is disabled
        client = openai.AsyncOpenAI(api_key=self._api_key, max_retries=0)
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": USER_INSTRUCTION},
                            {"type": "image_url", "image_url": {"url": image_data}},
                        ],
                    },
                ],
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except openai.APIStatusError as e:
            logger.error("OpenAI API error: %s %s", e.status_code, e.message)
            raise UpstreamAPIError("OpenAI", e.status_code) from e

        if not response.choices or not response.choices[0].message.content:
            raise ReceiptFormatError("Invalid AI response format")

        text = response.choices[0].message.content
        logger.debug("AI response: %s", text)
        return text
