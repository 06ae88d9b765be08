"""Typed interfaces for database-layer services.

All SQL access to the metadata store must remain in the db package and its
submodules.
"""

from typing import Protocol

from portal.domain import AppNamespace, HealthStatus, UpstreamUnavailableError


class MetadataStoreUnavailableError(UpstreamUnavailableError):
    """Raised when the metadata store cannot be read or written."""

    default_error_code = "METADATA_STORE_UNAVAILABLE"


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class AppNamespaceRepositoryPort(Protocol):
    """Port definition for the authoritative app-namespace metadata catalog."""

    def db_app_namespace_list_by_app(self, app_id: str) -> list[AppNamespace]:
        """List active declarations owned by one application.

        Args:
            app_id: Owning application identifier.

        Returns:
            list[AppNamespace]: Declarations ordered by name.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

    def db_app_namespace_list_public(self) -> list[AppNamespace]:
        """List all active public declarations.

        Returns:
            list[AppNamespace]: Public declarations ordered by name.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

    def db_app_namespace_get(self, app_id: str, name: str) -> AppNamespace | None:
        """Fetch one active declaration by owner and name.

        Args:
            app_id: Owning application identifier.
            name: Namespace name.

        Returns:
            AppNamespace | None: Matching declaration or None.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

    def db_app_namespace_get_public_by_name(self, name: str) -> AppNamespace | None:
        """Fetch one active public declaration by name, regardless of owner.

        Args:
            name: Namespace name.

        Returns:
            AppNamespace | None: Matching public declaration or None.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

    def db_app_namespace_create(self, app_namespace: AppNamespace, operator: str) -> AppNamespace:
        """Persist one new declaration.

        Args:
            app_namespace: Declaration to persist.
            operator: Principal recorded as creator.

        Returns:
            AppNamespace: Persisted declaration.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store write fails.
        """

    def db_app_namespace_delete(self, app_id: str, name: str, operator: str) -> AppNamespace | None:
        """Soft-delete one active declaration.

        Args:
            app_id: Owning application identifier.
            name: Namespace name.
            operator: Principal recorded as deleter.

        Returns:
            AppNamespace | None: Deleted declaration or None when absent.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store write fails.
        """

    def db_app_id_list(self) -> list[str]:
        """List application identifiers that own at least one active declaration.

        Returns:
            list[str]: Sorted application identifiers.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """
