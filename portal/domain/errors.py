"""Project-native typed exceptions shared across the portal layers."""

from __future__ import annotations


class PortalError(Exception):
    """Base exception for portal failures.

    Attributes:
        error_code: Stable machine-readable error code.
    """

    default_error_code = "PORTAL_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code or self.default_error_code


class NamespaceNotFoundError(PortalError, LookupError):
    """Requested namespace or declaration does not exist in the queried store."""

    default_error_code = "NOT_FOUND"


class NamespaceValidationError(PortalError, ValueError):
    """Malformed input rejected before any catalog call is made."""

    default_error_code = "VALIDATION_ERROR"


class UpstreamUnavailableError(PortalError, ConnectionError):
    """A catalog or environment store was unreachable or failed server-side."""

    default_error_code = "UPSTREAM_UNAVAILABLE"


class NamespaceSerializationError(PortalError, ValueError):
    """Namespace content could not be rendered into the requested format."""

    default_error_code = "SERIALIZATION_ERROR"


class PermissionDeniedError(PortalError, PermissionError):
    """Principal may not see the requested configuration."""

    default_error_code = "PERMISSION_DENIED"


class AppNamespaceConflictError(PortalError, ValueError):
    """Declaration collides with an existing private or public declaration."""

    default_error_code = "CONFLICT"
