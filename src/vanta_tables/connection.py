"""
Per-connection client cache.

Creating a client with OAuth credentials costs a token exchange, so clients
are created once per set of credentials and shared by every query that runs
against that connection.
"""

import threading
from collections.abc import Callable

import requests

from vanta_tables.config import Settings
from vanta_tables.logging_config import get_logger, log_with_context
from vanta_tables.rest_client import VantaRestClient

logger = get_logger(__name__)


class ConnectionManager:
    """
    Cache of REST clients keyed by connection.

    Concurrent callers asking for the same connection block on a lock while
    the first one creates the client, so exactly one token exchange happens
    per connection.

    Attributes:
        session_factory: Optional callable producing the HTTP session for
            new clients (tests inject a session here)
    """

    def __init__(self, session_factory: Callable[[], requests.Session] | None = None) -> None:
        self.session_factory = session_factory
        self._clients: dict[str, VantaRestClient] = {}
        self._lock: threading.Lock = threading.Lock()

    def get_client(self, settings: Settings) -> VantaRestClient:
        """
        Return the client for a connection, creating it on first use.

        Args:
            settings: Connection settings

        Returns:
            Shared client for these credentials

        Raises:
            ConfigurationError: If the settings carry no usable credentials
            AuthenticationError: If the OAuth token exchange fails
        """
        key = settings.connection_key()
        with self._lock:
            client = self._clients.get(key)
            if client is not None:
                return client

            session = self.session_factory() if self.session_factory else None
            client = VantaRestClient.from_settings(settings, session=session)
            self._clients[key] = client

        log_with_context(
            logger,
            "info",
            "Created Vanta client for connection",
            base_url=settings.base_url,
            oauth=settings.uses_oauth,
        )
        return client

    def reset(self) -> None:
        """Close and forget every cached client."""
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)
