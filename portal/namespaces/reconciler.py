"""Drift detection between the metadata store and one environment."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, wait

from portal.adapters import EnvironmentCatalogRegistry
from portal.db import AppNamespaceRepositoryPort
from portal.domain import AppNamespace

from .validation import validation_require_name, validation_require_text


def reconciler_missing_namespace_names(
    declarations: Iterable[AppNamespace],
    environment_declaration_names: Iterable[str],
    instance_names: Iterable[str],
) -> set[str]:
    """Compute the missing set from the three catalog reads.

    Every declaration must exist in the environment catalog. Private
    declarations must also have a cluster instance; public ones are checked
    at declaration level only.

    Args:
        declarations: Declarations of the application in the metadata store.
        environment_declaration_names: Declaration names known to the environment.
        instance_names: Namespace instance names in the target cluster.

    Returns:
        set[str]: `(declared - env_declared) | (private_declared - instances)`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    declared_names: set[str] = set()
    private_declared_names: set[str] = set()
    for app_namespace in declarations:
        declared_names.add(app_namespace.name)
        if not app_namespace.is_public:
            private_declared_names.add(app_namespace.name)

    missing_app_namespace_names = declared_names - set(environment_declaration_names)
    missing_private_namespace_names = private_declared_names - set(instance_names)
    return missing_app_namespace_names | missing_private_namespace_names


class NamespaceReconciler:
    """Computes app namespaces declared in metadata but absent from an environment."""

    def __init__(
        self,
        app_namespace_repository: AppNamespaceRepositoryPort,
        environment_registry: EnvironmentCatalogRegistry,
    ):
        """Initialize reconciler dependencies.

        Args:
            app_namespace_repository: Metadata store catalog.
            environment_registry: Registry resolving environment catalog clients.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if app_namespace_repository is None:
            raise ValueError("app_namespace_repository must not be None")
        if environment_registry is None:
            raise ValueError("environment_registry must not be None")
        self._app_namespace_repository = app_namespace_repository
        self._environment_registry = environment_registry

    def reconciler_compute_missing(self, app_id: str, env: str, cluster_name: str) -> set[str]:
        """Compute the missing set for one (app, env, cluster).

        The three catalog reads run concurrently; the result is only returned
        once all of them succeeded.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.

        Returns:
            set[str]: Missing namespace names, freshly computed.

        Raises:
            NamespaceValidationError: Raised for blank inputs or an unknown environment.
            UpstreamUnavailableError: Raised when any of the reads fails.
            NamespaceNotFoundError: Raised when the environment does not know the cluster.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        normalized_cluster_name = validation_require_name(cluster_name, "cluster_name")
        environment_client = self._environment_registry.registry_get_client(env)

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="reconcile") as executor:
            declarations_future = executor.submit(
                self._app_namespace_repository.db_app_namespace_list_by_app,
                normalized_app_id,
            )
            environment_declarations_future = executor.submit(
                environment_client.catalog_list_app_namespaces,
                normalized_app_id,
            )
            instances_future = executor.submit(
                environment_client.catalog_list_namespaces,
                normalized_app_id,
                normalized_cluster_name,
            )
            wait([declarations_future, environment_declarations_future, instances_future])

        # result() re-raises the first failing read; nothing partial escapes.
        declarations = declarations_future.result()
        environment_declarations = environment_declarations_future.result()
        instances = instances_future.result()

        return reconciler_missing_namespace_names(
            declarations=declarations,
            environment_declaration_names=[app_namespace.name for app_namespace in environment_declarations],
            instance_names=[namespace.namespace_name for namespace in instances],
        )
