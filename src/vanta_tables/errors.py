"""
Custom exception classes for vanta-tables.

This module defines the exceptions raised while authenticating against
Vanta, fetching pages from the REST API, and executing table queries.
Each exception carries a retryable flag so a host can decide whether a
failed query is worth re-issuing.

Exception Hierarchy:
    VantaTablesError (base)
    ├── VantaApiError (HTTP/network failures)
    │   └── AuthenticationError (token exchange or missing credentials)
    ├── ConfigurationError (invalid settings)
    └── QueryError (unknown table/column, missing required qualifier)

Retry Semantics:
    - Network errors, 429 and 5xx responses are marked retryable
    - Authentication, 4xx and query errors are permanent
    - Nothing in this package retries on its own; the flag is advisory
"""

import re
from http import HTTPStatus

_NOT_FOUND_PATTERN = re.compile(r"(?i)not found")


class VantaTablesError(Exception):
    """
    Base exception for all vanta-tables errors.

    Attributes:
        message: Human-readable error description
        retryable: Whether this error should be retried
        context: Additional context dictionary for structured logging
    """

    def __init__(
        self,
        message: str,
        retryable: bool = False,
        context: dict[str, object] | None = None,
    ) -> None:
        """
        Initialize vanta-tables error.

        Args:
            message: Human-readable error description
            retryable: Whether this error should be retried
            context: Additional context for structured logging
        """
        super().__init__(message)
        self.message = message
        self.retryable = retryable
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation of error."""
        return self.message


class VantaApiError(VantaTablesError):
    """
    Error communicating with the Vanta REST API.

    Raised for non-200 responses, undecodable bodies and network failures.

    Attributes:
        status_code: HTTP status code from Vanta (None for network errors)
        response_body: Response body for debugging
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        retryable: bool = True,
    ) -> None:
        """
        Initialize Vanta API error.

        Args:
            message: Human-readable error description
            status_code: HTTP status code from Vanta
            response_body: Raw response body for debugging
            retryable: Whether to retry (default True for API errors)
        """
        context = {
            "status_code": status_code,
            "response_body": response_body[:500] if response_body else None,
        }
        super().__init__(message, retryable=retryable, context=context)
        self.status_code = status_code
        self.response_body = response_body

    @classmethod
    def from_status(cls, status_code: int, body: str, path: str) -> "VantaApiError":
        """
        Build an error for a non-200 response.

        Rate limiting (429) and server errors (5xx) are retryable, every
        other status is treated as permanent.

        Args:
            status_code: HTTP status code returned by Vanta
            body: Raw response body
            path: Request path, included in the message

        Returns:
            VantaApiError describing the failed request
        """
        return cls(
            f"received non-200 http response status code ({status_code}) for {path}, body: {body}",
            status_code=status_code,
            response_body=body,
            retryable=status_code == 429 or status_code >= 500,
        )


class AuthenticationError(VantaApiError):
    """
    Error obtaining or presenting credentials.

    Raised when the OAuth client-credentials exchange fails, when the token
    response does not contain an access token, or when a request is made
    with no token available. Never retryable.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            retryable=False,
        )


class ConfigurationError(VantaTablesError):
    """
    Error in vanta-tables configuration.

    Raised when required configuration is missing or invalid. These are
    permanent errors that require user intervention.

    Attributes:
        config_key: Configuration key that is invalid
        reason: Specific validation failure reason
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        reason: str | None = None,
    ) -> None:
        """
        Initialize configuration error.

        Args:
            message: Human-readable error description
            config_key: Configuration key that failed validation
            reason: Why the configuration is invalid
        """
        context = {
            "config_key": config_key,
            "reason": reason,
        }
        super().__init__(message, retryable=False, context=context)
        self.config_key = config_key
        self.reason = reason


class QueryError(VantaTablesError):
    """
    Error planning or executing a table query.

    Raised for unknown tables or columns and for list calls that are
    missing a required key column qualifier.

    Attributes:
        table: Table the query targeted
        column: Offending column, if any
    """

    def __init__(
        self,
        message: str,
        table: str | None = None,
        column: str | None = None,
    ) -> None:
        context = {
            "table": table,
            "column": column,
        }
        super().__init__(message, retryable=False, context=context)
        self.table = table
        self.column = column


def is_not_found_error(err: BaseException) -> bool:
    """
    Check whether an error means the requested resource does not exist.

    Args:
        err: Error raised by a hydrate function

    Returns:
        True for 404 responses or any error whose text mentions "not found"
    """
    if isinstance(err, VantaApiError) and err.status_code == 404:
        return True
    return bool(_NOT_FOUND_PATTERN.search(str(err)))


def build_error_message(err: VantaTablesError) -> str:
    """
    Build a short message for an error surfaced to the host.

    Not-found errors are returned verbatim. API errors with a known HTTP
    status are prefixed with the status phrase so that a bare status code
    in the logs still reads naturally.

    Args:
        err: Error to describe

    Returns:
        Message suitable for displaying to a user

    Example:
        >>> build_error_message(VantaApiError("boom", status_code=503))
        'Service Unavailable: boom'
    """
    if is_not_found_error(err):
        return str(err)
    status_code = getattr(err, "status_code", None)
    if status_code is None:
        return str(err)
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        return str(err)
    return f"{phrase}: {err}"
