"""Database layer package for metadata store access."""

from .app_namespace import SQLAlchemyAppNamespaceService
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import AppNamespaceRepositoryPort, DatabaseHealthPort, MetadataStoreUnavailableError
from .session import db_create_engine

__all__ = [
	"AppNamespaceRepositoryPort",
	"DatabaseHealthPort",
	"MetadataStoreUnavailableError",
	"SQLAlchemyAppNamespaceService",
	"SQLAlchemyDatabaseHealthService",
	"db_create_engine",
]
