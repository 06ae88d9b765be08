"""Domain models and errors used across application layer boundaries."""

from .errors import (
	AppNamespaceConflictError,
	NamespaceNotFoundError,
	NamespaceSerializationError,
	NamespaceValidationError,
	PermissionDeniedError,
	PortalError,
	UpstreamUnavailableError,
)
from .models import AppNamespace, ConfigFileFormat, HealthStatus, Namespace, NamespaceItem, NamespaceUsage

__all__ = [
	"AppNamespace",
	"AppNamespaceConflictError",
	"ConfigFileFormat",
	"HealthStatus",
	"Namespace",
	"NamespaceItem",
	"NamespaceNotFoundError",
	"NamespaceSerializationError",
	"NamespaceUsage",
	"NamespaceValidationError",
	"PermissionDeniedError",
	"PortalError",
	"UpstreamUnavailableError",
]
