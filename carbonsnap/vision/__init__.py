"""Vision backend base class, reply decoding, and factory."""

from __future__ import annotations

import base64
import binascii
import json
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..config import CarbonSnapConfig

_DATA_URL = re.compile(r"^data:(?P<mime>[^;,]+)?(?:;[^;,]*)*;base64,(?P<data>.*)$", re.S)


class UpstreamAPIError(RuntimeError):
    """The AI provider answered with a non-success HTTP status."""

    def __init__(self, provider: str, status: int | None) -> None:
        super().__init__(f"{provider} API error: {status}")
        self.provider = provider
        self.status = status


class ReceiptFormatError(ValueError):
    """The AI reply could not be decoded as JSON."""


class ReceiptVisionBackend(ABC):
    """Abstract base for receipt extraction from an image."""

    name: str = ""

    @abstractmethod
    async def extract_receipt(self, image_data: str) -> str:
        """Send one receipt image to the model and return its raw reply text.

        ``image_data`` is a data URL or an image URL reachable by the provider.
        """
        ...


def parse_data_url(image_data: str) -> tuple[str, bytes] | None:
    """Split a base64 data URL into ``(mime_type, raw_bytes)``.

    Returns None when ``image_data`` is not a base64 data URL.
    """
    m = _DATA_URL.match(image_data.strip())
    if m is None:
        return None
    try:
        data = base64.b64decode(m.group("data"), validate=False)
    except (binascii.Error, ValueError):
        return None
    return (m.group("mime") or "image/jpeg", data)


def parse_reply(text: str) -> Any:
    """Decode the model's JSON reply, tolerating markdown fences."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ReceiptFormatError("Invalid AI response format") from e


def create_backend(config: CarbonSnapConfig) -> ReceiptVisionBackend:
    """Create a vision backend based on configuration."""
    backend_name = config.ai.backend

    match backend_name:
        case "openai":
            from .gpt import GPTReceiptBackend

            return GPTReceiptBackend(
                api_key=config.ai.openai.api_key,
                model=config.ai.openai.model,
                max_tokens=config.ai.max_tokens,
                temperature=config.ai.temperature,
            )
        case "claude":
            from .claude import ClaudeReceiptBackend

            return ClaudeReceiptBackend(
                api_key=config.ai.claude.api_key,
                model=config.ai.claude.model,
                max_tokens=config.ai.max_tokens,
                temperature=config.ai.temperature,
            )
        case "gemini":
            from .gemini import GeminiReceiptBackend

            return GeminiReceiptBackend(
                api_key=config.ai.gemini.api_key,
                model=config.ai.gemini.model,
                max_tokens=config.ai.max_tokens,
                temperature=config.ai.temperature,
            )
        case _:
            raise ValueError(
                f"Unknown vision backend: {backend_name!r} "
                f"(choose one of openai / claude / gemini)"
            )


__all__ = [
    "ReceiptFormatError",
    "ReceiptVisionBackend",
    "UpstreamAPIError",
    "create_backend",
    "parse_data_url",
    "parse_reply",
]
