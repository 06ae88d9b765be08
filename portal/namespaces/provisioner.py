"""Best-effort provisioning of namespaces into environments."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from portal.adapters import EnvironmentCatalogRegistry
from portal.db import AppNamespaceRepositoryPort
from portal.domain import AppNamespace, NamespaceNotFoundError, NamespaceValidationError, PortalError

from .interfaces import (
    NamespaceBatchResult,
    NamespaceCreationFailure,
    NamespaceCreationRequest,
    ProvisioningFailure,
    ProvisioningResult,
)
from .reconciler import NamespaceReconciler
from .validation import validation_require_name, validation_require_text

logger = logging.getLogger(__name__)


class NamespaceProvisioner:
    """Creates namespaces in environments one at a time, collecting per-namespace failures."""

    def __init__(
        self,
        reconciler: NamespaceReconciler,
        app_namespace_repository: AppNamespaceRepositoryPort,
        environment_registry: EnvironmentCatalogRegistry,
    ):
        """Initialize provisioner dependencies.

        Args:
            reconciler: Reconciler used to compute the missing set.
            app_namespace_repository: Metadata store catalog used to read declarations.
            environment_registry: Registry resolving environment catalog clients.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if reconciler is None:
            raise ValueError("reconciler must not be None")
        if app_namespace_repository is None:
            raise ValueError("app_namespace_repository must not be None")
        if environment_registry is None:
            raise ValueError("environment_registry must not be None")
        self._reconciler = reconciler
        self._app_namespace_repository = app_namespace_repository
        self._environment_registry = environment_registry

    def provisioner_create_missing(self, app_id: str, env: str, cluster_name: str) -> ProvisioningResult:
        """Provision every currently missing namespace.

        The missing set is recomputed on each call. Per-namespace failures are
        collected and do not stop the batch; a failing reconciliation aborts
        before anything is created.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.

        Returns:
            ProvisioningResult: Created names and per-name failures.

        Raises:
            NamespaceValidationError: Raised for blank inputs or an unknown environment.
            UpstreamUnavailableError: Raised when the missing set cannot be computed.
        """

        missing_names = self._reconciler.reconciler_compute_missing(
            app_id=app_id,
            env=env,
            cluster_name=cluster_name,
        )
        normalized_app_id = app_id.strip()
        normalized_env = self._environment_registry.registry_normalize_env(env)
        normalized_cluster_name = cluster_name.strip()
        environment_client = self._environment_registry.registry_get_client(normalized_env)

        created: list[str] = []
        failures: list[ProvisioningFailure] = []
        for namespace_name in sorted(missing_names):
            try:
                app_namespace = self._app_namespace_repository.db_app_namespace_get(
                    app_id=normalized_app_id,
                    name=namespace_name,
                )
                if app_namespace is None:
                    failures.append(
                        ProvisioningFailure(
                            namespace_name=namespace_name,
                            error_code="NOT_FOUND",
                            message=f"app namespace {namespace_name} no longer exists in metadata store",
                        )
                    )
                    continue
                environment_client.catalog_create_missing_app_namespace(app_namespace)
            except PortalError as error:
                logger.warning(
                    "create missing namespace failed: app_id=%s env=%s cluster=%s namespace=%s error=%s",
                    normalized_app_id,
                    normalized_env,
                    normalized_cluster_name,
                    namespace_name,
                    error,
                )
                failures.append(
                    ProvisioningFailure(
                        namespace_name=namespace_name,
                        error_code=error.error_code,
                        message=str(error),
                    )
                )
                continue
            created.append(namespace_name)

        logger.info(
            "provisioned missing namespaces: app_id=%s env=%s cluster=%s created=%d failed=%d",
            normalized_app_id,
            normalized_env,
            normalized_cluster_name,
            len(created),
            len(failures),
        )
        return ProvisioningResult(
            app_id=normalized_app_id,
            env=normalized_env,
            cluster_name=normalized_cluster_name,
            created=tuple(created),
            failures=tuple(failures),
        )

    def provisioner_create_namespaces(
        self,
        app_id: str,
        requests: Sequence[NamespaceCreationRequest],
        operator: str,
    ) -> NamespaceBatchResult:
        """Create namespace instances across environments and clusters, best effort.

        The whole batch is validated before the first write: every env must be
        configured and every namespace must be declared by the app or
        publicly. Writes then run in request order; a failing write is logged
        and recorded and the batch continues.

        Args:
            app_id: Application identifier.
            requests: Instances to create; duplicates are created once.
            operator: Principal recorded by the environments.

        Returns:
            NamespaceBatchResult: Created requests and per-request failures.

        Raises:
            NamespaceValidationError: Raised for an empty batch, blank or malformed
                inputs, or an unknown environment.
            NamespaceNotFoundError: Raised when a requested namespace has no declaration.
            MetadataStoreUnavailableError: Raised when declarations cannot be read.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        normalized_operator = validation_require_text(operator, "operator")
        if not requests:
            raise NamespaceValidationError("at least one namespace must be requested")

        normalized_requests: list[NamespaceCreationRequest] = []
        for request in requests:
            normalized_request = NamespaceCreationRequest(
                env=self._environment_registry.registry_normalize_env(request.env),
                cluster_name=validation_require_name(request.cluster_name, "cluster_name"),
                namespace_name=validation_require_name(request.namespace_name, "namespace_name"),
            )
            if normalized_request not in normalized_requests:
                normalized_requests.append(normalized_request)

        for namespace_name in sorted({request.namespace_name for request in normalized_requests}):
            if self._provisioner_find_declaration(normalized_app_id, namespace_name) is None:
                raise NamespaceNotFoundError(
                    f"app namespace not found: app_id={normalized_app_id} name={namespace_name}"
                )

        created: list[NamespaceCreationRequest] = []
        failures: list[NamespaceCreationFailure] = []
        for request in normalized_requests:
            try:
                self._environment_registry.registry_get_client(request.env).catalog_create_namespace(
                    app_id=normalized_app_id,
                    cluster_name=request.cluster_name,
                    namespace_name=request.namespace_name,
                    operator=normalized_operator,
                )
            except PortalError as error:
                logger.warning(
                    "create namespace failed: app_id=%s env=%s cluster=%s namespace=%s error=%s",
                    normalized_app_id,
                    request.env,
                    request.cluster_name,
                    request.namespace_name,
                    error,
                )
                failures.append(
                    NamespaceCreationFailure(request=request, error_code=error.error_code, message=str(error))
                )
                continue
            created.append(request)

        logger.info(
            "created namespaces: app_id=%s operator=%s created=%d failed=%d",
            normalized_app_id,
            normalized_operator,
            len(created),
            len(failures),
        )
        return NamespaceBatchResult(app_id=normalized_app_id, created=tuple(created), failures=tuple(failures))

    def _provisioner_find_declaration(self, app_id: str, namespace_name: str) -> AppNamespace | None:
        app_namespace = self._app_namespace_repository.db_app_namespace_get(app_id=app_id, name=namespace_name)
        if app_namespace is not None:
            return app_namespace
        return self._app_namespace_repository.db_app_namespace_get_public_by_name(namespace_name)
