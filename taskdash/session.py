"""Session/identity holder.

Tracks who is signed in and moves between three states::

    anonymous --restore() with stored token--> loading
    loading   --identity fetched-------------> authenticated
    loading   --identity fetch failed--------> anonymous
    anonymous --sign_in()/sign_up() ok-------> authenticated
    authenticated --sign_out()---------------> anonymous

There is no retry or refresh-token flow: a rejected token simply ends the
session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from pydantic import ValidationError

from .api_client import ApiClient, ApiError
from .models.schemas import AuthResponse, Profile
from .utils.logger import get_logger

logger = get_logger(__name__)


class SessionStatus(str, Enum):
    ANONYMOUS = "anonymous"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of sign-in/sign-up. Exactly one of ``user``/``error`` is set."""

    user: Optional[Profile] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


StatusListener = Callable[[SessionStatus], None]


class SessionManager:
    """Owns the current identity and the credential lifecycle."""

    def __init__(
        self,
        client: ApiClient,
        on_authenticated: Optional[Callable[[Profile], None]] = None,
    ):
        self.client = client
        self.on_authenticated = on_authenticated
        self.status = SessionStatus.ANONYMOUS
        self.user: Optional[Profile] = None
        self._listeners: List[StatusListener] = []

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _transition(self, status: SessionStatus, user: Optional[Profile] = None) -> None:
        self.status = status
        self.user = user
        logger.debug("Session -> %s", status.value)
        for listener in list(self._listeners):
            listener(status)

    def _authenticated(self, user: Profile) -> None:
        self._transition(SessionStatus.AUTHENTICATED, user)
        if self.on_authenticated is not None:
            self.on_authenticated(user)

    def restore(self) -> Optional[Profile]:
        """Resume a stored session (called once on startup)."""
        if not self.client.token:
            return None

        self._transition(SessionStatus.LOADING)
        try:
            user = Profile.model_validate(self.client.get_current_user())
        except (ApiError, ValidationError) as exc:
            logger.error("Error getting current user: %s", exc)
            self._transition(SessionStatus.ANONYMOUS)
            return None

        self._authenticated(user)
        return self.user

    def _complete(self, response: dict) -> AuthResult:
        auth = AuthResponse.model_validate(response)
        self.client.set_token(auth.token)
        self._authenticated(auth.user)
        if not self.is_authenticated:
            return AuthResult(error="Session expired while loading")
        return AuthResult(user=auth.user)

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            return self._complete(self.client.login(email, password))
        except (ApiError, ValidationError) as exc:
            logger.warning("Sign-in failed for %s: %s", email, exc)
            return AuthResult(error=str(exc))

    def sign_up(self, email: str, password: str, name: str) -> AuthResult:
        try:
            return self._complete(self.client.register(name, email, password))
        except (ApiError, ValidationError) as exc:
            logger.warning("Sign-up failed for %s: %s", email, exc)
            return AuthResult(error=str(exc))

    def expire(self) -> None:
        """Drop the identity after the backend rejected the credential."""
        if self.status is not SessionStatus.ANONYMOUS:
            self._transition(SessionStatus.ANONYMOUS)

    def sign_out(self) -> None:
        self.client.clear_token()
        self._transition(SessionStatus.ANONYMOUS)
        logger.info("Signed out")
