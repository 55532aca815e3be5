"""
Vanta REST API client.

This module wraps the read endpoints of Vanta's public REST API
(https://api.vanta.com/v1) used by the tables in this package. The client
handles authentication, cursor pagination and error translation; it does
not retry or back off.

Authentication Modes:
    - OAuth client credentials (recommended): the client exchanges
      client_id/client_secret for an access token at creation time,
      refreshes it shortly before it expires, and refreshes once more if a
      request comes back 401.
    - Static access token: used as-is in the Authorization header.

OAuth Scopes:
    - vanta-api.all:read: Required for reading compliance data

Pagination:
    List endpoints accept ``pageSize`` (1-100) and ``pageCursor`` and return
    ``results.pageInfo.{hasNextPage,endCursor}``. ``paginate`` follows the
    cursor until ``hasNextPage`` is false.

Usage:
    from vanta_tables.rest_client import VantaRestClient

    client = VantaRestClient(
        client_id="your_client_id",
        client_secret="your_client_secret",
    )
    for person in client.list_people(page_size=50):
        print(person.email_address)
"""

import threading
from urllib.parse import quote
from collections.abc import Iterator
from types import TracebackType
from typing import Any, ClassVar, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from vanta_tables import __version__
from vanta_tables.config import DEFAULT_BASE_URL, SCOPE_ALL_READ, Settings
from vanta_tables.errors import AuthenticationError, VantaApiError
from vanta_tables.logging_config import get_logger, log_with_context
from vanta_tables.models import (
    Computer,
    Evidence,
    Group,
    Integration,
    Page,
    Person,
    Policy,
    Test,
    TestEntity,
    Vendor,
    parse_page,
)
from vanta_tables.rate_limiter import TokenBucketRateLimiter
from vanta_tables.token_store import BearerTokenStore, OAuthTokenStore, TokenStore

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class VantaRestClient:
    """
    Client for the Vanta REST API.

    One client corresponds to one set of credentials. It keeps a persistent
    HTTP session for connection pooling and is safe to share between
    threads: the token store is lock-protected and token refreshes are
    serialized.

    Attributes:
        base_url: Vanta API base URL
        session: Persistent HTTP session
        token_store: Source of the Authorization header
        timeout: Per-request timeout in seconds
    """

    OAUTH_TOKEN_ENDPOINT: ClassVar[str] = "/oauth/token"
    PEOPLE_ENDPOINT: ClassVar[str] = "/v1/people"
    POLICIES_ENDPOINT: ClassVar[str] = "/v1/policies"
    GROUPS_ENDPOINT: ClassVar[str] = "/v1/groups"
    INTEGRATIONS_ENDPOINT: ClassVar[str] = "/v1/integrations"
    COMPUTERS_ENDPOINT: ClassVar[str] = "/v1/monitored-computers"
    VENDORS_ENDPOINT: ClassVar[str] = "/v1/vendors"
    TESTS_ENDPOINT: ClassVar[str] = "/v1/tests"
    AUDITS_ENDPOINT: ClassVar[str] = "/v1/audits"

    RATE_LIMIT_TIMEOUT_SECONDS: ClassVar[float] = 120.0

    def __init__(
        self,
        access_token: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        scopes: list[str] | None = None,
        timeout: float = 30.0,
        requests_per_minute: int | None = 50,
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize the client.

        OAuth credentials take precedence over a static access token. With
        OAuth credentials the token exchange happens immediately, so a bad
        client secret fails here rather than on the first query.

        Args:
            access_token: Pre-issued bearer token
            client_id: OAuth client ID
            client_secret: OAuth client secret
            base_url: Vanta API base URL
            scopes: OAuth scopes (default: vanta-api.all:read)
            timeout: Per-request timeout in seconds
            requests_per_minute: Client-side request budget (None or 0 disables)
            session: HTTP session to use instead of a new one

        Raises:
            AuthenticationError: If no credentials are given or the token
                exchange fails
        """
        self.base_url: str = base_url.rstrip("/")
        self.timeout: float = timeout
        self.scopes: list[str] = list(scopes) if scopes else [SCOPE_ALL_READ]
        self.session: requests.Session = session or requests.Session()
        self.session.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": f"vanta-tables/{__version__}",
            }
        )
        self._client_id: str | None = client_id
        self._client_secret: str | None = client_secret
        self._refresh_lock: threading.Lock = threading.Lock()
        self._limiter: TokenBucketRateLimiter | None = TokenBucketRateLimiter.for_budget(
            requests_per_minute
        )

        self.token_store: TokenStore
        if client_id and client_secret:
            self._oauth_store: OAuthTokenStore | None = OAuthTokenStore()
            self.token_store = self._oauth_store
            self._refresh_token()
        elif access_token:
            self._oauth_store = None
            self.token_store = BearerTokenStore(access_token)
            log_with_context(
                logger,
                "info",
                "Initialized Vanta client with access token",
                base_url=self.base_url,
            )
        else:
            raise AuthenticationError(
                "either provide an access token or OAuth client credentials (client_id and client_secret)"
            )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: requests.Session | None = None,
    ) -> "VantaRestClient":
        """
        Create a client from validated settings.

        Args:
            settings: Connection settings
            session: Optional HTTP session

        Returns:
            Authenticated client
        """
        settings.validate_credentials()
        return cls(
            access_token=settings.access_token,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            base_url=settings.base_url,
            scopes=settings.scopes,
            timeout=settings.request_timeout_seconds,
            requests_per_minute=settings.requests_per_minute,
            session=session,
        )

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    @property
    def uses_oauth(self) -> bool:
        return self._oauth_store is not None

    def _refresh_token(self) -> None:
        """
        Obtain a new access token with the client-credentials grant.

        Raises:
            AuthenticationError: If the exchange fails or the response
                carries no access token
        """
        if not self._client_id:
            raise AuthenticationError("empty oauth client id")
        if not self._client_secret:
            raise AuthenticationError("empty oauth client secret")
        if self._oauth_store is None:
            raise AuthenticationError("client was not configured for OAuth")

        try:
            response = self.session.post(
                f"{self.base_url}{self.OAUTH_TOKEN_ENDPOINT}",
                json={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "scope": " ".join(self.scopes),
                    "grant_type": "client_credentials",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"Vanta token request failed: {e}") from e

        if response.status_code != 200:
            raise AuthenticationError(
                "failed to acquire auth token with oauth credentials: received non-200 "
                + f"http response status code ({response.status_code}), body: {response.text}",
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            token_data: dict[str, Any] = response.json()
        except ValueError as e:
            raise AuthenticationError(
                f"failed to JSON-decode token response body: {e}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        access_token = token_data.get("access_token")
        if not access_token:
            raise AuthenticationError(
                "No access token in authentication response",
                status_code=response.status_code,
            )

        expires_in = token_data.get("expires_in")
        self._oauth_store.set_oauth_token(
            str(token_data.get("token_type") or "Bearer"),
            str(access_token),
            int(expires_in) if expires_in else None,
        )

        log_with_context(
            logger,
            "info",
            "Authenticated with Vanta API via OAuth",
            base_url=self.base_url,
            expires_in=expires_in,
        )

    def _ensure_fresh_token(self) -> None:
        if self._oauth_store is None or not self._oauth_store.is_expired():
            return
        with self._refresh_lock:
            # Another thread may have refreshed while we waited
            if self._oauth_store.is_expired():
                log_with_context(logger, "info", "Access token expiring, refreshing")
                self._refresh_token()

    def _force_refresh(self, stale_token: str) -> None:
        with self._refresh_lock:
            _, current = self.token_store.get_token()
            if current == stale_token:
                self._refresh_token()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _acquire_rate_limit(self) -> None:
        if self._limiter is None:
            return
        if not self._limiter.acquire(timeout=self.RATE_LIMIT_TIMEOUT_SECONDS):
            raise VantaApiError(
                "Rate limit acquisition timeout - too many requests",
                retryable=True,
            )

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        """
        Perform an authenticated request and decode the JSON body.

        A 401 on an OAuth client triggers a single token refresh and retry.

        Args:
            method: HTTP method
            path: Path relative to the base URL (e.g. "/v1/people")
            params: Query string parameters

        Returns:
            Decoded JSON body

        Raises:
            AuthenticationError: If no token is available
            VantaApiError: On network errors, non-200 responses or bodies
                that are not JSON
        """
        self._ensure_fresh_token()
        retried = False

        while True:
            token_type, token = self.token_store.get_token()
            if not token:
                raise AuthenticationError("no auth token present")

            self._acquire_rate_limit()

            try:
                response = self.session.request(
                    method,
                    f"{self.base_url}{path}",
                    params=params,
                    headers={"Authorization": f"{token_type} {token}"},
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                log_with_context(
                    logger,
                    "error",
                    "Vanta API network error",
                    path=path,
                    error=str(e),
                )
                raise VantaApiError(
                    f"failed to execute http request: {e}",
                    retryable=True,
                ) from e

            if response.status_code == 401 and self.uses_oauth and not retried:
                log_with_context(
                    logger,
                    "warning",
                    "Received 401, attempting re-authentication",
                    path=path,
                )
                self._force_refresh(token)
                retried = True
                continue

            if response.status_code != 200:
                log_with_context(
                    logger,
                    "error",
                    "Vanta API request failed",
                    path=path,
                    status_code=response.status_code,
                    response_body=response.text[:500],
                )
                raise VantaApiError.from_status(response.status_code, response.text, path)

            try:
                return response.json()
            except ValueError as e:
                raise VantaApiError(
                    f"failed to JSON-decode response body: {e}",
                    status_code=response.status_code,
                    response_body=response.text,
                    retryable=False,
                ) from e

    def fetch_page(
        self,
        path: str,
        item_model: type[ModelT],
        page_size: int | None = None,
        cursor: str | None = None,
        params: dict[str, str] | None = None,
    ) -> Page[ModelT]:
        """
        Fetch a single page from a list endpoint.

        Args:
            path: List endpoint path
            item_model: Model for each item
            page_size: Items per page (omitted when None or not positive)
            cursor: Cursor returned by the previous page
            params: Additional filter parameters

        Returns:
            Parsed page

        Raises:
            VantaApiError: If the request fails or the payload does not match
                the model
        """
        query: dict[str, str] = dict(params or {})
        if page_size and page_size > 0:
            query["pageSize"] = str(page_size)
        if cursor:
            query["pageCursor"] = cursor

        payload = self.request("GET", path, query)
        if not isinstance(payload, dict):
            raise VantaApiError(
                f"unexpected response shape for {path}",
                status_code=200,
                retryable=False,
            )
        try:
            page = parse_page(payload, item_model)
        except ValidationError as e:
            raise VantaApiError(
                f"failed to decode {item_model.__name__} page from {path}: {e}",
                status_code=200,
                retryable=False,
            ) from e

        log_with_context(
            logger,
            "debug",
            "Fetched page",
            path=path,
            item_count=len(page.data),
            has_next_page=page.page_info.has_next_page,
            end_cursor=page.page_info.end_cursor,
        )
        return page

    def paginate(
        self,
        path: str,
        item_model: type[ModelT],
        page_size: int | None = None,
        params: dict[str, str] | None = None,
    ) -> Iterator[ModelT]:
        """
        Iterate over every item of a list endpoint.

        Pages are fetched lazily, so a consumer that stops early (for
        example because a query limit was reached) does not trigger further
        requests.

        Args:
            path: List endpoint path
            item_model: Model for each item
            page_size: Items per page
            params: Additional filter parameters

        Yields:
            Validated items in API order
        """
        cursor: str | None = None
        seen_cursors: set[str] = set()

        while True:
            page = self.fetch_page(path, item_model, page_size, cursor, params)
            yield from page.data

            next_cursor = page.next_cursor
            if next_cursor is None:
                return
            if next_cursor in seen_cursors:
                log_with_context(
                    logger,
                    "warning",
                    "Pagination cursor repeated, stopping",
                    path=path,
                    cursor=next_cursor,
                )
                return
            seen_cursors.add(next_cursor)
            cursor = next_cursor

    @staticmethod
    def _item_path(path: str, item_id: str, label: str) -> str:
        """
        Build the path of one item, escaping the id as a single segment.

        Raises:
            ValueError: If the id is empty or a dot segment
        """
        if not item_id:
            raise ValueError(f"{label} ID cannot be empty")
        if item_id in (".", ".."):
            raise ValueError(f"invalid {label} ID '{item_id}'")
        return f"{path}/{quote(item_id, safe='')}"

    def _get_one(self, path: str, item_id: str, item_model: type[ModelT], label: str) -> ModelT:
        payload = self.request("GET", self._item_path(path, item_id, label))
        try:
            return item_model.model_validate(payload)
        except ValidationError as e:
            raise VantaApiError(
                f"failed to decode {label} {item_id}: {e}",
                status_code=200,
                retryable=False,
            ) from e

    # -------------------------------------------------------------------------
    # People
    # -------------------------------------------------------------------------

    def list_people(self, page_size: int | None = None) -> Iterator[Person]:
        return self.paginate(self.PEOPLE_ENDPOINT, Person, page_size)

    def list_people_page(self, page_size: int | None = None, cursor: str | None = None) -> Page[Person]:
        return self.fetch_page(self.PEOPLE_ENDPOINT, Person, page_size, cursor)

    def get_person(self, person_id: str) -> Person:
        return self._get_one(self.PEOPLE_ENDPOINT, person_id, Person, "person")

    # -------------------------------------------------------------------------
    # Policies
    # -------------------------------------------------------------------------

    def list_policies(self, page_size: int | None = None) -> Iterator[Policy]:
        return self.paginate(self.POLICIES_ENDPOINT, Policy, page_size)

    def list_policies_page(self, page_size: int | None = None, cursor: str | None = None) -> Page[Policy]:
        return self.fetch_page(self.POLICIES_ENDPOINT, Policy, page_size, cursor)

    def get_policy(self, policy_id: str) -> Policy:
        return self._get_one(self.POLICIES_ENDPOINT, policy_id, Policy, "policy")

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    def list_groups(self, page_size: int | None = None) -> Iterator[Group]:
        return self.paginate(self.GROUPS_ENDPOINT, Group, page_size)

    def list_groups_page(self, page_size: int | None = None, cursor: str | None = None) -> Page[Group]:
        return self.fetch_page(self.GROUPS_ENDPOINT, Group, page_size, cursor)

    def get_group(self, group_id: str) -> Group:
        return self._get_one(self.GROUPS_ENDPOINT, group_id, Group, "group")

    # -------------------------------------------------------------------------
    # Integrations
    # -------------------------------------------------------------------------

    def list_integrations(self, page_size: int | None = None) -> Iterator[Integration]:
        return self.paginate(self.INTEGRATIONS_ENDPOINT, Integration, page_size)

    def list_integrations_page(
        self, page_size: int | None = None, cursor: str | None = None
    ) -> Page[Integration]:
        return self.fetch_page(self.INTEGRATIONS_ENDPOINT, Integration, page_size, cursor)

    def get_integration(self, integration_id: str) -> Integration:
        return self._get_one(self.INTEGRATIONS_ENDPOINT, integration_id, Integration, "integration")

    # -------------------------------------------------------------------------
    # Computers
    # -------------------------------------------------------------------------

    def list_computers(self, page_size: int | None = None) -> Iterator[Computer]:
        return self.paginate(self.COMPUTERS_ENDPOINT, Computer, page_size)

    def list_computers_page(
        self, page_size: int | None = None, cursor: str | None = None
    ) -> Page[Computer]:
        return self.fetch_page(self.COMPUTERS_ENDPOINT, Computer, page_size, cursor)

    def get_computer(self, computer_id: str) -> Computer:
        return self._get_one(self.COMPUTERS_ENDPOINT, computer_id, Computer, "computer")

    # -------------------------------------------------------------------------
    # Vendors
    # -------------------------------------------------------------------------

    def list_vendors(self, page_size: int | None = None) -> Iterator[Vendor]:
        return self.paginate(self.VENDORS_ENDPOINT, Vendor, page_size)

    def list_vendors_page(self, page_size: int | None = None, cursor: str | None = None) -> Page[Vendor]:
        return self.fetch_page(self.VENDORS_ENDPOINT, Vendor, page_size, cursor)

    def get_vendor(self, vendor_id: str) -> Vendor:
        return self._get_one(self.VENDORS_ENDPOINT, vendor_id, Vendor, "vendor")

    # -------------------------------------------------------------------------
    # Tests
    # -------------------------------------------------------------------------

    @staticmethod
    def _test_filter_params(
        status: str | None = None,
        framework: str | None = None,
        integration: str | None = None,
        control: str | None = None,
        owner: str | None = None,
        category: str | None = None,
        is_in_rollout: bool | None = None,
    ) -> dict[str, str]:
        params: dict[str, str] = {}
        if status:
            params["statusFilter"] = status
        if framework:
            params["frameworkFilter"] = framework
        if integration:
            params["integrationFilter"] = integration
        if control:
            params["controlFilter"] = control
        if owner:
            params["ownerFilter"] = owner
        if category:
            params["categoryFilter"] = category
        if is_in_rollout is not None:
            params["isInRollout"] = "true" if is_in_rollout else "false"
        return params

    def list_tests(
        self,
        page_size: int | None = None,
        *,
        status: str | None = None,
        framework: str | None = None,
        integration: str | None = None,
        control: str | None = None,
        owner: str | None = None,
        category: str | None = None,
        is_in_rollout: bool | None = None,
    ) -> Iterator[Test]:
        """
        Iterate over automated tests, optionally filtered server-side.

        Args:
            page_size: Items per page (1-100, API default 10)
            status: OK, DEACTIVATED, NEEDS_ATTENTION, IN_PROGRESS, INVALID
                or NOT_APPLICABLE
            framework: Framework ID (e.g. "soc2")
            integration: Integration ID (e.g. "aws")
            control: Control ID
            owner: Owner user ID
            category: Test category (e.g. "Infrastructure")
            is_in_rollout: Restrict to tests that are (or are not) in rollout

        Yields:
            Tests in API order

        Example:
            >>> failing = list(client.list_tests(status="NEEDS_ATTENTION"))
        """
        params = self._test_filter_params(
            status, framework, integration, control, owner, category, is_in_rollout
        )
        return self.paginate(self.TESTS_ENDPOINT, Test, page_size, params)

    def list_tests_page(
        self,
        page_size: int | None = None,
        cursor: str | None = None,
        **filters: Any,
    ) -> Page[Test]:
        params = self._test_filter_params(**filters)
        return self.fetch_page(self.TESTS_ENDPOINT, Test, page_size, cursor, params)

    def get_test(self, test_id: str) -> Test:
        return self._get_one(self.TESTS_ENDPOINT, test_id, Test, "test")

    def list_test_entities(
        self,
        test_id: str,
        entity_status: str | None = None,
        page_size: int | None = None,
    ) -> Iterator[TestEntity]:
        """
        Iterate over the resources a test evaluated.

        Args:
            test_id: Test ID
            entity_status: Restrict to FAILING or DEACTIVATED entities
            page_size: Items per page

        Yields:
            Test entities

        Raises:
            ValueError: If test_id is empty
        """
        path = f"{self._item_path(self.TESTS_ENDPOINT, test_id, 'test')}/entities"
        params = {"entityStatus": entity_status} if entity_status else None
        return self.paginate(path, TestEntity, page_size, params)

    def list_test_entities_page(
        self,
        test_id: str,
        entity_status: str | None = None,
        page_size: int | None = None,
        cursor: str | None = None,
    ) -> Page[TestEntity]:
        path = f"{self._item_path(self.TESTS_ENDPOINT, test_id, 'test')}/entities"
        params = {"entityStatus": entity_status} if entity_status else None
        return self.fetch_page(path, TestEntity, page_size, cursor, params)

    # -------------------------------------------------------------------------
    # Audit evidence
    # -------------------------------------------------------------------------

    def list_evidence(self, audit_id: str, page_size: int | None = None) -> Iterator[Evidence]:
        """
        Iterate over the evidence attached to an audit.

        Args:
            audit_id: Audit ID
            page_size: Items per page

        Yields:
            Evidence items

        Raises:
            ValueError: If audit_id is empty
        """
        return self.paginate(self._evidence_path(audit_id), Evidence, page_size)

    def list_evidence_page(
        self,
        audit_id: str,
        page_size: int | None = None,
        cursor: str | None = None,
    ) -> Page[Evidence]:
        return self.fetch_page(self._evidence_path(audit_id), Evidence, page_size, cursor)

    def _evidence_path(self, audit_id: str) -> str:
        if not audit_id:
            raise ValueError("audit ID is required")
        return f"{self._item_path(self.AUDITS_ENDPOINT, audit_id, 'audit')}/evidence"

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "VantaRestClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
