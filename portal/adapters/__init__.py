"""Adapter layer package for per-environment admin service boundaries."""

from .catalog_errors import (
	EnvironmentCatalogConnectionError,
	EnvironmentCatalogError,
	EnvironmentCatalogNotFoundError,
	EnvironmentCatalogResponseError,
	EnvironmentCatalogTimeoutError,
)
from .environment_catalog import HttpEnvironmentCatalogClient
from .interfaces import EnvironmentCatalogPort
from .registry import EnvironmentCatalogRegistry, adapter_create_environment_registry

__all__ = [
	"EnvironmentCatalogConnectionError",
	"EnvironmentCatalogError",
	"EnvironmentCatalogNotFoundError",
	"EnvironmentCatalogPort",
	"EnvironmentCatalogRegistry",
	"EnvironmentCatalogResponseError",
	"EnvironmentCatalogTimeoutError",
	"HttpEnvironmentCatalogClient",
	"adapter_create_environment_registry",
]
