"""Gemini API vision backend for receipt extraction."""

from __future__ import annotations

import logging

from . import ReceiptFormatError, ReceiptVisionBackend, UpstreamAPIError, parse_data_url
from .prompt import SYSTEM_PROMPT, USER_INSTRUCTION

logger = logging.getLogger(__name__)


class GeminiReceiptBackend(ReceiptVisionBackend):
    """Extract receipt data using Google Gemini's vision capability."""

    name = "gemini"

    def __init__(
        self,
        api_key: str = "",
        model: str = "gemini-2.0-flash",
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
                "Gemini API key not configured. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        decoded = parse_data_url(image_data)
        if decoded is None:
            raise ValueError("Gemini backend requires the image as a base64 data URL")
        mime_type, data = decoded

        try:
            import google.generativeai as genai
            from google.api_core import exceptions as google_exceptions
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model, system_instruction=SYSTEM_PROMPT)

        try:
            response = await model.generate_content_async(
                [USER_INSTRUCTION, {"mime_type": mime_type, "data": data}],
                generation_config={
                    "max_output_tokens": self._max_tokens,
                    "temperature": self._temperature,
                },
            )
        except google_exceptions.GoogleAPICallError as e:
            logger.error("Gemini API error: %s %s", e.code, e.message)
            raise UpstreamAPIError("Gemini", e.code) from e

        text = response.text
        if not text:
            raise ReceiptFormatError("Invalid AI response format")
        logger.debug("AI response: %s", text)
        return text
