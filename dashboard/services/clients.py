"""Client factories for the dashboard layer."""

from __future__ import annotations

from typing import Callable, Optional

from taskdash.api_client import ApiClient
from taskdash.config import get_settings
from taskdash.token_store import TokenStore


def get_api_client(on_unauthorized: Optional[Callable[[str], None]] = None) -> ApiClient:
    """Return a backend client bound to the configured credential slot."""

    settings = get_settings()
    return ApiClient(
        base_url=settings.api_base_url,
        token_store=TokenStore(settings.token_file, settings.token_slot),
        on_unauthorized=on_unauthorized,
        timeout=settings.request_timeout,
        login_path=settings.login_path,
    )
