"""
Shared pytest fixtures for vanta-tables tests.

This module provides common fixtures used across the unit tests: a clean
environment, settings with fake credentials, a REST client backed by
mocked HTTP responses, and realistic API payloads for each resource.

Usage:
    @responses.activate
    def test_something(token_client, person_payload):
        # Fixtures are injected automatically by pytest
        assert person_payload["id"] == "person-001"
"""

from collections.abc import Callable, Generator
from typing import Any

import pytest
from _pytest.monkeypatch import MonkeyPatch

from vanta_tables.config import Settings, get_settings
from vanta_tables.rest_client import VantaRestClient

BASE_URL = "https://api.vanta.com"


def page_payload(
    items: list[dict[str, Any]],
    has_next_page: bool = False,
    end_cursor: str | None = None,
) -> dict[str, Any]:
    """Wrap items in the envelope every list endpoint returns."""
    return {
        "results": {
            "data": items,
            "pageInfo": {
                "hasNextPage": has_next_page,
                "endCursor": end_cursor,
                "hasPreviousPage": False,
                "startCursor": None,
            },
        }
    }


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: MonkeyPatch) -> Generator[None, None, None]:
    """
    Remove Vanta settings from the environment.

    Keeps a developer's real credentials from leaking into tests and
    clears the cached settings before and after every test.

    Args:
        monkeypatch: pytest monkeypatch fixture
    """
    for key in (
        "VANTA_CLIENT_ID",
        "VANTA_CLIENT_SECRET",
        "VANTA_ACCESS_TOKEN",
        "VANTA_API_TOKEN",
        "VANTA_BASE_URL",
        "VANTA_SCOPES",
        "VANTA_PAGE_SIZE",
        "VANTA_REQUEST_TIMEOUT_SECONDS",
        "VANTA_REQUESTS_PER_MINUTE",
        "LOG_LEVEL",
        "VANTA_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_env_vars(monkeypatch: MonkeyPatch) -> dict[str, str]:
    """
    Set up mock environment variables for testing.

    Provides a static access token and disables client-side throttling
    so Settings can be instantiated without real credentials.

    Args:
        monkeypatch: pytest monkeypatch fixture

    Returns:
        Dictionary of environment variable names and values
    """
    env_vars = {
        "VANTA_ACCESS_TOKEN": "test_vanta_token_12345",
        "VANTA_PAGE_SIZE": "100",
        "VANTA_REQUESTS_PER_MINUTE": "0",
        "LOG_LEVEL": "DEBUG",
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars


@pytest.fixture
def mock_settings(mock_env_vars: dict[str, str]) -> Settings:
    """
    Provide test Settings instance with fake credentials.

    Args:
        mock_env_vars: Environment variables fixture (used for side effects)

    Returns:
        Configured Settings instance for testing
    """
    # Fixture is used for side effects
    _ = mock_env_vars
    # Create Settings directly to bypass lru_cache
    return Settings()  # pyright: ignore[reportCallIssue]


@pytest.fixture
def token_client() -> VantaRestClient:
    """
    Provide a client authenticated with a static token.

    Throttling is disabled so tests never sleep. HTTP calls still need
    ``@responses.activate`` on the test.

    Returns:
        VantaRestClient using "test_token"
    """
    return VantaRestClient(access_token="test_token", requests_per_minute=0)


# =============================================================================
# Sample Payload Fixtures
# =============================================================================


@pytest.fixture
def person_payload() -> dict[str, Any]:
    """Provide a /v1/people item for a current employee."""
    return {
        "id": "person-001",
        "emailAddress": "ada@example.com",
        "employment": {
            "endDate": None,
            "jobTitle": "Staff Engineer",
            "startDate": "2023-02-01T00:00:00.000Z",
            "status": "CURRENT",
        },
        "name": {"display": "Ada Lovelace", "last": "Lovelace", "first": "Ada"},
        "groupIds": ["group-eng"],
        "sources": {
            "emailAddress": {"integrationId": "gsuite", "resourceId": "res-1", "type": "INTEGRATION"},
            "employment": {"integrationId": "gusto", "resourceId": "res-2", "type": "INTEGRATION"},
        },
        "tasksSummary": {
            "completionDate": None,
            "dueDate": "2024-03-01T00:00:00.000Z",
            "status": "DUE_SOON",
            "details": {
                "completeTrainings": {"taskType": "COMPLETE_TRAININGS", "status": "COMPLETE"},
                "acceptPolicies": {
                    "taskType": "ACCEPT_POLICIES",
                    "status": "DUE_SOON",
                    "unacceptedPolicies": [{"name": "Acceptable Use Policy"}],
                    "acceptedPolicies": [],
                },
            },
        },
    }


@pytest.fixture
def inactive_person_payload() -> dict[str, Any]:
    """Provide a /v1/people item for a former employee."""
    return {
        "id": "person-002",
        "emailAddress": "charles@example.com",
        "employment": {
            "endDate": "2024-01-31T00:00:00.000Z",
            "jobTitle": "Analyst",
            "startDate": "2022-05-01T00:00:00.000Z",
            "status": "INACTIVE",
        },
        "name": {"display": "Charles Babbage", "last": "Babbage", "first": "Charles"},
        "groupIds": [],
    }


@pytest.fixture
def computer_payload() -> dict[str, Any]:
    """Provide a /v1/monitored-computers item with mixed check outcomes."""
    return {
        "id": "computer-001",
        "integrationId": "vanta-agent",
        "lastCheckDate": "2024-06-01T12:00:00.000Z",
        "operatingSystem": {"type": "MACOS", "version": "14.5"},
        "owner": {"id": "person-001", "emailAddress": "ada@example.com", "displayName": "Ada Lovelace"},
        "serialNumber": "C02XYZ123",
        "udid": "UDID-1234",
        "screenlock": {"outcome": "PASS"},
        "diskEncryption": {"outcome": "FAIL"},
        "passwordManager": None,
        "antivirusInstallation": {"outcome": "PASS"},
    }


@pytest.fixture
def vendor_payload() -> dict[str, Any]:
    """Provide a /v1/vendors item."""
    return {
        "id": "vendor-001",
        "name": "Acme Cloud",
        "websiteUrl": "https://acme.example.com",
        "accountManagerName": "Wile E.",
        "accountManagerEmail": "wile@acme.example.com",
        "servicesProvided": "Hosting",
        "securityOwnerUserId": "person-001",
        "lastSecurityReviewCompletionDate": "2024-04-15T00:00:00.000Z",
        "isVisibleToAuditors": True,
        "isRiskAutoScored": False,
        "category": {"displayName": "Infrastructure"},
        "authDetails": {"method": "SSO", "passwordMFA": True},
        "riskAttributeIds": ["risk-1"],
        "status": "MANAGED",
        "inherentRiskLevel": "HIGH",
        "residualRiskLevel": "MEDIUM",
        "contractAmount": 12000.5,
    }


@pytest.fixture
def monitor_payload() -> dict[str, Any]:
    """Provide a /v1/tests item that needs attention."""
    return {
        "id": "aws-s3-bucket-encryption",
        "name": "S3 buckets are encrypted",
        "lastTestRunDate": "2024-06-02T08:00:00.000Z",
        "latestFlipDate": "2024-05-30T08:00:00.000Z",
        "description": "Verifies that S3 buckets have default encryption enabled.",
        "failureDescription": "Some buckets are not encrypted.",
        "remediationDescription": "Enable default encryption.",
        "version": {"major": 1, "minor": 2, "_id": "v-1"},
        "category": "Infrastructure",
        "integrations": ["aws"],
        "status": "NEEDS_ATTENTION",
        "deactivatedStatusInfo": {"isDeactivated": False},
        "remediationStatusInfo": {"status": "DUE_SOON", "itemCount": 2},
        "owner": {"id": "person-001", "emailAddress": "ada@example.com", "displayName": "Ada Lovelace"},
    }


@pytest.fixture
def evidence_payload() -> dict[str, Any]:
    """Provide a /v1/audits/{id}/evidence item."""
    return {
        "id": "evidence-001",
        "externalId": "ext-001",
        "status": "READY_FOR_AUDIT",
        "name": "Access review",
        "deletionDate": None,
        "creationDate": "2024-01-10T00:00:00.000Z",
        "statusUpdatedDate": "2024-02-10T00:00:00.000Z",
        "testStatus": None,
        "evidenceType": "Document",
        "evidenceId": "doc-001",
        "relatedControls": [
            {"name": "Access reviews", "sectionNames": ["CC6.1"]},
            {"name": "User provisioning", "sectionNames": ["CC6.2"]},
        ],
        "description": "Quarterly access review export",
    }


@pytest.fixture
def page_factory() -> Callable[..., dict[str, Any]]:
    """
    Provide a builder for list endpoint payloads.

    Returns:
        Function taking (items, has_next_page=False, end_cursor=None)
    """
    return page_payload
