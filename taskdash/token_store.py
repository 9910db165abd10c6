"""
Token Store - Persists the bearer credential under a single named slot.

The backend issues one opaque token on login/register. It is kept in a small
JSON file so a restarted dashboard can restore the session, and removed as
soon as the backend rejects it.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .config import get_settings
from .utils.logger import get_logger

logger = get_logger(__name__)


class TokenStore:
    """
    File-backed credential slot.

    Handles:
    - Loading a stored token on startup
    - Saving a freshly issued token
    - Clearing the token on sign-out or rejection
    """

    def __init__(self, path: Union[str, Path, None] = None, slot: Optional[str] = None):
        settings = get_settings()
        self.path = Path(path or settings.token_file)
        self.slot = slot or settings.token_slot
        self._token: Optional[str] = None
        self.load()

    @property
    def token(self) -> Optional[str]:
        return self._token

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning(f"Could not read token file {self.path}: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> Optional[str]:
        """Load the token from local storage if available."""
        value = self._read().get(self.slot)
        self._token = value if isinstance(value, str) and value else None
        if self._token:
            logger.info("Loaded stored credential")
        return self._token

    def save(self, token: str) -> None:
        """Save the token to local storage."""
        data = self._read()
        data[self.slot] = token
        data["saved_at"] = datetime.now().isoformat()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)
        # Secure the file
        self.path.chmod(0o600)
        self._token = token
        logger.info("Saved credential")

    def clear(self) -> None:
        """Remove the stored token."""
        self._token = None
        data = self._read()
        if self.slot not in data:
            return
        data.pop(self.slot, None)
        data.pop("saved_at", None)
        try:
            if data:
                with open(self.path, "w") as f:
                    json.dump(data, f, indent=2)
            else:
                self.path.unlink()
        except OSError as exc:
            logger.warning(f"Could not clear token file: {exc}")
