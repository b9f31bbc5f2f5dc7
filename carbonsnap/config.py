"""TOML configuration loader for carbonsnap."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class OpenAIConfig:
    api_key: str = ""
    model: str = "gpt-4o-mini"


@dataclass
class ClaudeConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class GeminiConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class AIConfig:
    backend: str = "openai"
    max_tokens: int = 2000
    temperature: float = 0.1
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)


@dataclass
class StoreConfig:
    url: str = ""
    key: str = ""
    persist_session: bool = True
    auto_refresh_token: bool = True


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class CarbonSnapConfig:
    ai: AIConfig = field(default_factory=AIConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> CarbonSnapConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys and store credentials can be supplied via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    ai = raw.get("ai", {})
    sto = raw.get("store", {})
    srv = raw.get("server", {})
    log = raw.get("logging", {})

    openai_cfg = ai.get("openai", {})
    claude_cfg = ai.get("claude", {})
    gemini_cfg = ai.get("gemini", {})

    # Resolve secrets: config file → environment variable
    openai_api_key = openai_cfg.get("api_key", "") or os.environ.get(
        "OPENAI_API_KEY", ""
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )
    store_url = sto.get("url", "") or os.environ.get("SUPABASE_URL", "")
    store_key = sto.get("key", "") or os.environ.get("SUPABASE_ANON_KEY", "")

    return CarbonSnapConfig(
        ai=AIConfig(
            backend=ai.get("backend", "openai"),
            max_tokens=ai.get("max_tokens", 2000),
            temperature=ai.get("temperature", 0.1),
            openai=OpenAIConfig(
                api_key=openai_api_key,
                model=openai_cfg.get("model", "gpt-4o-mini"),
            ),
            claude=ClaudeConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
            gemini=GeminiConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
        ),
        store=StoreConfig(
            url=store_url,
            key=store_key,
            persist_session=sto.get("persist_session", True),
            auto_refresh_token=sto.get("auto_refresh_token", True),
        ),
        server=ServerConfig(
            host=srv.get("host", "127.0.0.1"),
            port=srv.get("port", 8000),
        ),
        logging=LoggingConfig(
            level=log.get("level", "INFO"),
        ),
    )
