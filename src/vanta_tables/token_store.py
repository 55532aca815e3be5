"""
Thread-safe storage for Vanta API credentials.

A token store hands the REST client the ``(token_type, token)`` pair used to
build the Authorization header. Stores are shared between threads that run
queries against the same connection, so every read and write is guarded by
a lock.
"""

import threading
import time
from typing import Protocol


class TokenStore(Protocol):
    """Anything that can supply an Authorization token."""

    def get_token(self) -> tuple[str, str]:
        """Return the token type and token value."""
        ...


class StaticTokenStore:
    """
    Token store holding a single token that can be replaced.

    Attributes:
        token_type: Authorization scheme, for example "Bearer"
        token: Token value (empty string when no token has been set)
    """

    def __init__(self, token_type: str = "", token: str = "") -> None:
        self._lock: threading.Lock = threading.Lock()
        self._token_type: str = token_type
        self._token: str = token

    def get_token(self) -> tuple[str, str]:
        with self._lock:
            return self._token_type, self._token

    def set_token(self, token_type: str, token: str) -> None:
        with self._lock:
            self._token_type = token_type
            self._token = token


class BearerTokenStore(StaticTokenStore):
    """Static store for a pre-issued bearer token."""

    def __init__(self, token: str) -> None:
        super().__init__("Bearer", token)

    def set_bearer_token(self, token: str) -> None:
        self.set_token("Bearer", token)


class OAuthTokenStore(StaticTokenStore):
    """
    Token store for tokens obtained through the client-credentials flow.

    In addition to the token itself the store remembers when the token
    expires, so the client can refresh proactively instead of waiting for
    a 401.

    Attributes:
        expires_at: Monotonic deadline after which the token is stale,
            or None if the token server did not report a lifetime
    """

    def __init__(self) -> None:
        super().__init__()
        self._expires_at: float | None = None

    def set_oauth_token(self, token_type: str, token: str, expires_in: int | None) -> None:
        """
        Store a freshly issued token.

        Args:
            token_type: Scheme reported by the token endpoint ("bearer" is
                normalized to "Bearer")
            token: Access token
            expires_in: Token lifetime in seconds, if reported
        """
        normalized = "Bearer" if not token_type or token_type.lower() == "bearer" else token_type
        with self._lock:
            self._token_type = normalized
            self._token = token
            self._expires_at = time.monotonic() + expires_in if expires_in else None

    @property
    def expires_at(self) -> float | None:
        with self._lock:
            return self._expires_at

    def is_expired(self, skew_seconds: float = 60.0) -> bool:
        """
        Check whether the token needs refreshing.

        Args:
            skew_seconds: Refresh this many seconds before the real expiry

        Returns:
            True if no token is stored or it expires within the skew window
        """
        with self._lock:
            if not self._token:
                return True
            if self._expires_at is None:
                return False
            return time.monotonic() + skew_seconds >= self._expires_at
