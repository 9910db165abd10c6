"""Centralized configuration loading.

Loads environment variables once and provides a typed Settings object
for the rest of the codebase. Entry points only need to import this module
for a local .env file to be respected.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv


# Load .env once at import time
load_dotenv()

_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))


@dataclass
class Settings:
    # Backend
    api_base_url: str = os.getenv("TASKDASH_API_BASE_URL", "http://localhost:8000/api")
    request_timeout: float = float(os.getenv("TASKDASH_REQUEST_TIMEOUT", "15"))

    # Credential storage (single named slot)
    token_file: str = os.getenv(
        "TASKDASH_TOKEN_FILE", os.path.join(_REPO_ROOT, ".taskdash_token.json")
    )
    token_slot: str = os.getenv("TASKDASH_TOKEN_SLOT", "auth_token")

    # Where a rejected session is sent
    login_path: str = os.getenv("TASKDASH_LOGIN_PATH", "/login")

    # Bulk load fan-out
    max_workers: int = int(os.getenv("TASKDASH_MAX_WORKERS", "6"))

    # Logging
    log_level: str = os.getenv("TD_LOG_LEVEL", "INFO")


def get_settings() -> Settings:
    """Return a new Settings instance (cheap dataclass construction)."""
    return Settings()
