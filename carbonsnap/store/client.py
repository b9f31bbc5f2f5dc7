"""Construction of the hosted store client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..config import StoreConfig


def create_store_client(config: StoreConfig) -> Any:
    """Create a Supabase client from explicit store configuration.

    Raises:
        ValueError: If the URL or key is missing.
        ImportError: If the supabase library is not installed.
    """
    if not config.url or not config.key:
        raise ValueError(
            "Store URL and key are not configured. "
            "Check the [store] section or SUPABASE_URL / SUPABASE_ANON_KEY."
        )

    try:
        from supabase import ClientOptions, create_client
    except ImportError:
        raise ImportError("supabase is required: pip install supabase") from None

    options = ClientOptions(
        persist_session=config.persist_session,
        auto_refresh_token=config.auto_refresh_token,
    )
    return create_client(config.url, config.key, options=options)
