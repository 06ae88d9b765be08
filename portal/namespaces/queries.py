"""Read access to provisioned namespace instances with visibility masking."""

from __future__ import annotations

import logging
from dataclasses import replace

from portal.adapters import EnvironmentCatalogRegistry
from portal.db import AppNamespaceRepositoryPort
from portal.domain import Namespace, NamespaceNotFoundError, NamespaceUsage, NamespaceValidationError, PermissionDeniedError

from .interfaces import NamespaceView
from .permissions import PermissionValidatorPort
from .validation import validation_require_name, validation_require_text

logger = logging.getLogger(__name__)

DEFAULT_CLUSTER_NAME = "default"
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 500


class NamespaceQueryService:
    """Lists, loads and deletes namespace instances on behalf of a principal."""

    def __init__(
        self,
        environment_registry: EnvironmentCatalogRegistry,
        permission_validator: PermissionValidatorPort,
        app_namespace_repository: AppNamespaceRepositoryPort,
    ):
        """Initialize query service dependencies.

        Args:
            environment_registry: Registry resolving environment catalog clients.
            permission_validator: Visibility policy evaluated per namespace.
            app_namespace_repository: Metadata store catalog.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if environment_registry is None:
            raise ValueError("environment_registry must not be None")
        if permission_validator is None:
            raise ValueError("permission_validator must not be None")
        if app_namespace_repository is None:
            raise ValueError("app_namespace_repository must not be None")
        self._environment_registry = environment_registry
        self._permission_validator = permission_validator
        self._app_namespace_repository = app_namespace_repository

    def queries_list_namespaces(self, app_id: str, env: str, cluster_name: str, principal: str) -> list[NamespaceView]:
        """List namespace instances of one cluster with items loaded.

        Namespaces the principal may not read are omitted; hidden ones are
        returned with their items withheld.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.
            principal: Requesting principal.

        Returns:
            list[NamespaceView]: Views sorted by namespace name.

        Raises:
            NamespaceValidationError: Raised for blank or malformed inputs.
            UpstreamUnavailableError: Raised when a store cannot be reached.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        normalized_cluster_name = validation_require_name(cluster_name, "cluster_name")
        normalized_env = self._environment_registry.registry_normalize_env(env)
        environment_client = self._environment_registry.registry_get_client(normalized_env)

        views: list[NamespaceView] = []
        instances = environment_client.catalog_list_namespaces(normalized_app_id, normalized_cluster_name)
        for namespace_name in sorted(instance.namespace_name for instance in instances):
            if not self._permission_validator.permission_can_read_namespace(
                principal,
                normalized_app_id,
                normalized_env,
                normalized_cluster_name,
                namespace_name,
            ):
                continue
            namespace = environment_client.catalog_load_namespace(
                app_id=normalized_app_id,
                cluster_name=normalized_cluster_name,
                namespace_name=namespace_name,
            )
            views.append(self._queries_build_view(namespace=namespace, principal=principal))
        return views

    def queries_get_namespace(
        self,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
        principal: str,
    ) -> NamespaceView:
        """Load one namespace instance as seen by the principal.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.
            principal: Requesting principal.

        Returns:
            NamespaceView: Namespace with items masked when hidden.

        Raises:
            NamespaceValidationError: Raised for blank or malformed inputs.
            PermissionDeniedError: Raised when the principal may not read the namespace.
            NamespaceNotFoundError: Raised when the instance does not exist.
            UpstreamUnavailableError: Raised when a store cannot be reached.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        normalized_cluster_name = validation_require_name(cluster_name, "cluster_name")
        normalized_namespace_name = validation_require_name(namespace_name, "namespace_name")
        normalized_env = self._environment_registry.registry_normalize_env(env)

        if not self._permission_validator.permission_can_read_namespace(
            principal,
            normalized_app_id,
            normalized_env,
            normalized_cluster_name,
            normalized_namespace_name,
        ):
            raise PermissionDeniedError(f"namespace {normalized_namespace_name} cannot be read by {principal}")

        namespace = self._environment_registry.registry_get_client(normalized_env).catalog_load_namespace(
            app_id=normalized_app_id,
            cluster_name=normalized_cluster_name,
            namespace_name=normalized_namespace_name,
        )
        return self._queries_build_view(namespace=namespace, principal=principal)

    def queries_namespace_usage(self, app_id: str, namespace_name: str) -> list[NamespaceUsage]:
        """Report, per configured environment and cluster, whether a namespace is provisioned.

        Args:
            app_id: Application identifier.
            namespace_name: Namespace name.

        Returns:
            list[NamespaceUsage]: One row per (env, cluster), envs in configuration order.

        Raises:
            NamespaceValidationError: Raised for blank or malformed inputs.
            UpstreamUnavailableError: Raised when an environment cannot be read.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        normalized_namespace_name = validation_require_name(namespace_name, "namespace_name")

        usages: list[NamespaceUsage] = []
        for env in self._environment_registry.registry_environment_names():
            environment_client = self._environment_registry.registry_get_client(env)
            for cluster_name in sorted(environment_client.catalog_list_cluster_names(normalized_app_id)):
                usages.append(
                    self._queries_cluster_usage(
                        app_id=normalized_app_id,
                        env=env,
                        cluster_name=cluster_name,
                        namespace_name=normalized_namespace_name,
                    )
                )
        return usages

    def queries_namespace_usage_by_env(
        self,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
    ) -> list[NamespaceUsage]:
        """Report whether a namespace is provisioned in one environment cluster.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.

        Returns:
            list[NamespaceUsage]: Single usage row, shaped like the cross-environment report.

        Raises:
            NamespaceValidationError: Raised for blank or malformed inputs.
            NamespaceNotFoundError: Raised when the cluster does not exist.
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """

        return [
            self._queries_cluster_usage(
                app_id=validation_require_text(app_id, "app_id"),
                env=self._environment_registry.registry_normalize_env(env),
                cluster_name=validation_require_name(cluster_name, "cluster_name"),
                namespace_name=validation_require_name(namespace_name, "namespace_name"),
            )
        ]

    def queries_find_associated_public_namespace(
        self,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
        principal: str,
    ) -> NamespaceView:
        """Load the public namespace an application's linked namespace inherits from.

        The public namespace is read from the owning application's cluster of
        the same name, or from its default cluster when the owner has no such
        cluster.

        Args:
            app_id: Application that links the public namespace.
            env: Environment identifier.
            cluster_name: Cluster of the linking application.
            namespace_name: Public namespace name.
            principal: Requesting principal.

        Returns:
            NamespaceView: Owner's namespace instance with items masked when hidden.

        Raises:
            NamespaceValidationError: Raised for blank or malformed inputs.
            NamespaceNotFoundError: Raised when no public declaration or owner instance exists.
            UpstreamUnavailableError: Raised when a store cannot be reached.
        """

        validation_require_text(app_id, "app_id")
        normalized_cluster_name = validation_require_name(cluster_name, "cluster_name")
        normalized_namespace_name = validation_require_name(namespace_name, "namespace_name")
        normalized_env = self._environment_registry.registry_normalize_env(env)

        public_declaration = self._app_namespace_repository.db_app_namespace_get_public_by_name(
            normalized_namespace_name
        )
        if public_declaration is None:
            raise NamespaceNotFoundError(f"public app namespace not found: name={normalized_namespace_name}")

        environment_client = self._environment_registry.registry_get_client(normalized_env)
        owner_cluster_name = normalized_cluster_name
        if owner_cluster_name not in environment_client.catalog_list_cluster_names(public_declaration.app_id):
            owner_cluster_name = DEFAULT_CLUSTER_NAME
        namespace = environment_client.catalog_load_namespace(
            app_id=public_declaration.app_id,
            cluster_name=owner_cluster_name,
            namespace_name=normalized_namespace_name,
        )
        return self._queries_build_view(namespace=namespace, principal=principal)

    def queries_list_public_namespace_instances(
        self,
        env: str,
        public_namespace_name: str,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> list[Namespace]:
        """List one page of every application's instances of a public namespace.

        Args:
            env: Environment identifier.
            public_namespace_name: Public namespace name.
            page: Zero-based page index.
            size: Page size, between 1 and `MAX_PAGE_SIZE`.

        Returns:
            list[Namespace]: Instances without items, in environment order.

        Raises:
            NamespaceValidationError: Raised for blank or malformed inputs or an invalid page.
            NamespaceNotFoundError: Raised when no public declaration has this name.
            UpstreamUnavailableError: Raised when a store cannot be reached.
        """

        normalized_namespace_name = validation_require_name(public_namespace_name, "namespace_name")
        normalized_env = self._environment_registry.registry_normalize_env(env)
        if page < 0:
            raise NamespaceValidationError(f"page must be >= 0, got {page}")
        if not 1 <= size <= MAX_PAGE_SIZE:
            raise NamespaceValidationError(f"size must be between 1 and {MAX_PAGE_SIZE}, got {size}")

        if self._app_namespace_repository.db_app_namespace_get_public_by_name(normalized_namespace_name) is None:
            raise NamespaceNotFoundError(f"public app namespace not found: name={normalized_namespace_name}")

        return self._environment_registry.registry_get_client(normalized_env).catalog_list_public_namespace_instances(
            public_namespace_name=normalized_namespace_name,
            page=page,
            size=size,
        )

    def queries_delete_linked_namespace(
        self,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
        operator: str,
    ) -> None:
        """Remove an application's instance of a public namespace from one cluster.

        Instances of the application's own private declarations are not linked
        namespaces and are refused.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.
            namespace_name: Public namespace name.
            operator: Principal performing the deletion.

        Returns:
            None: Deletion is a side effect in the environment.

        Raises:
            NamespaceValidationError: Raised for invalid inputs or a private namespace.
            NamespaceNotFoundError: Raised when no public declaration or instance exists.
            UpstreamUnavailableError: Raised when a store cannot be reached.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        normalized_cluster_name = validation_require_name(cluster_name, "cluster_name")
        normalized_namespace_name = validation_require_name(namespace_name, "namespace_name")
        normalized_operator = validation_require_text(operator, "operator")
        normalized_env = self._environment_registry.registry_normalize_env(env)

        own_declaration = self._app_namespace_repository.db_app_namespace_get(
            app_id=normalized_app_id,
            name=normalized_namespace_name,
        )
        if own_declaration is not None and not own_declaration.is_public:
            raise NamespaceValidationError(
                f"namespace {normalized_namespace_name} is private to app_id={normalized_app_id}",
                error_code="NOT_LINKED_NAMESPACE",
            )
        if self._app_namespace_repository.db_app_namespace_get_public_by_name(normalized_namespace_name) is None:
            raise NamespaceNotFoundError(f"public app namespace not found: name={normalized_namespace_name}")

        self._environment_registry.registry_get_client(normalized_env).catalog_delete_namespace(
            app_id=normalized_app_id,
            cluster_name=normalized_cluster_name,
            namespace_name=normalized_namespace_name,
            operator=normalized_operator,
        )
        logger.info(
            "linked namespace deleted: app_id=%s env=%s cluster=%s namespace=%s operator=%s",
            normalized_app_id,
            normalized_env,
            normalized_cluster_name,
            normalized_namespace_name,
            normalized_operator,
        )

    def _queries_build_view(self, namespace: Namespace, principal: str) -> NamespaceView:
        hidden = self._permission_validator.permission_should_hide_config(
            principal,
            namespace.app_id,
            namespace.env,
            namespace.cluster_name,
            namespace.namespace_name,
        )
        if hidden:
            return NamespaceView(namespace=replace(namespace, items=()), items_hidden=True)
        return NamespaceView(namespace=namespace, items_hidden=False)

    def _queries_cluster_usage(self, app_id: str, env: str, cluster_name: str, namespace_name: str) -> NamespaceUsage:
        instance_names = {
            instance.namespace_name
            for instance in self._environment_registry.registry_get_client(env).catalog_list_namespaces(
                app_id,
                cluster_name,
            )
        }
        return NamespaceUsage(
            app_id=app_id,
            namespace_name=namespace_name,
            env=env,
            cluster_name=cluster_name,
            provisioned=namespace_name in instance_names,
        )
