"""Project-native typed exceptions for environment catalog failures."""

from __future__ import annotations

from portal.domain import NamespaceNotFoundError, PortalError, UpstreamUnavailableError


class EnvironmentCatalogError(PortalError):
    """Base exception for environment admin service failures.

    Attributes:
        env: Environment whose catalog failed.
        status_code: Optional upstream HTTP status code.
    """

    def __init__(
        self,
        message: str,
        env: str,
        error_code: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message=message, error_code=error_code)
        self.env = env
        self.status_code = status_code


class EnvironmentCatalogConnectionError(EnvironmentCatalogError, UpstreamUnavailableError):
    """Transport-level connectivity failure while calling an environment."""

    default_error_code = "ENVIRONMENT_UNREACHABLE"


class EnvironmentCatalogTimeoutError(EnvironmentCatalogConnectionError, TimeoutError):
    """Environment admin service did not answer within the configured timeout."""

    default_error_code = "ENVIRONMENT_TIMEOUT"


class EnvironmentCatalogResponseError(EnvironmentCatalogError, UpstreamUnavailableError):
    """Environment admin service answered with an error status or invalid body."""

    default_error_code = "ENVIRONMENT_RESPONSE_ERROR"


class EnvironmentCatalogNotFoundError(EnvironmentCatalogError, NamespaceNotFoundError):
    """Requested resource (`404`) does not exist in the environment."""
