"""Typed interfaces for adapter-layer responsibilities."""

from typing import Protocol

from portal.domain import AppNamespace, Namespace


class EnvironmentCatalogPort(Protocol):
    """Port definition for one environment's runtime config store."""

    def adapter_environment_name(self) -> str:
        """Return the normalized environment identifier this client serves.

        Returns:
            str: Environment identifier.

        Raises:
            RuntimeError: Raised when environment metadata is unavailable.
        """

    def catalog_list_app_namespaces(self, app_id: str) -> list[AppNamespace]:
        """List app-namespace declarations the environment knows for one app.

        Args:
            app_id: Application identifier.

        Returns:
            list[AppNamespace]: Environment-side declarations.

        Raises:
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """

    def catalog_list_cluster_names(self, app_id: str) -> list[str]:
        """List cluster names provisioned for one app.

        Args:
            app_id: Application identifier.

        Returns:
            list[str]: Cluster names.

        Raises:
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """

    def catalog_list_namespaces(self, app_id: str, cluster_name: str) -> list[Namespace]:
        """List namespace instances of one (app, cluster), without items.

        Args:
            app_id: Application identifier.
            cluster_name: Cluster name.

        Returns:
            list[Namespace]: Namespace instances with empty item tuples.

        Raises:
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """

    def catalog_load_namespace(self, app_id: str, cluster_name: str, namespace_name: str) -> Namespace:
        """Load one namespace instance together with its items.

        Args:
            app_id: Application identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.

        Returns:
            Namespace: Namespace instance with items.

        Raises:
            NamespaceNotFoundError: Raised when the instance does not exist.
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """

    def catalog_create_missing_app_namespace(self, app_namespace: AppNamespace) -> None:
        """Create a declaration and its missing cluster instances silently.

        Args:
            app_namespace: Declaration copied from the metadata store.

        Returns:
            None: Creation is a side effect in the environment.

        Raises:
            UpstreamUnavailableError: Raised when the environment write fails.
        """

    def catalog_delete_namespace(
        self,
        app_id: str,
        cluster_name: str,
        namespace_name: str,
        operator: str,
    ) -> None:
        """Delete one namespace instance from a cluster.

        Args:
            app_id: Application identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.
            operator: Principal recorded by the environment.

        Returns:
            None: Deletion is a side effect in the environment.

        Raises:
            NamespaceNotFoundError: Raised when the instance does not exist.
            UpstreamUnavailableError: Raised when the environment write fails.
        """

    def catalog_create_namespace(
        self,
        app_id: str,
        cluster_name: str,
        namespace_name: str,
        operator: str,
    ) -> None:
        """Create one namespace instance in a cluster.

        Args:
            app_id: Application identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name, declared by the app or publicly.
            operator: Principal recorded by the environment.

        Returns:
            None: Creation is a side effect in the environment.

        Raises:
            UpstreamUnavailableError: Raised when the environment write fails.
        """

    def catalog_list_public_namespace_instances(
        self,
        public_namespace_name: str,
        page: int,
        size: int,
    ) -> list[Namespace]:
        """List one page of instances of a public namespace across every app.

        Args:
            public_namespace_name: Public namespace name.
            page: Zero-based page index.
            size: Page size.

        Returns:
            list[Namespace]: Namespace instances with empty item tuples.

        Raises:
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """
