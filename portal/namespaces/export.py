"""Single-namespace export and streamed multi-environment export archives."""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime, timezone

from portal.adapters import EnvironmentCatalogRegistry
from portal.db import AppNamespaceRepositoryPort
from portal.domain import NamespaceValidationError, PermissionDeniedError, PortalError

from .interfaces import ExportEntry, ExportFailure, ExportPlan, ExportReport
from .permissions import PermissionValidatorPort
from .serializer import serializer_derive_file_name, serializer_render
from .validation import validation_require_name, validation_require_text

logger = logging.getLogger(__name__)

ARCHIVE_FILE_NAME_PREFIX = "config_export_"
ARCHIVE_TIMESTAMP_FORMAT = "%Y_%m%d_%H_%M_%S"


class _ArchiveChunkBuffer:
    """Write-only sink collecting archive bytes until they are drained.

    It has no `seek`/`tell`, so `zipfile` writes local headers followed by
    data descriptors and never rewinds.
    """

    def __init__(self):
        self._chunks: list[bytes] = []

    def write(self, data: bytes) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        return None

    def archive_drain(self) -> bytes:
        drained = b"".join(self._chunks)
        self._chunks.clear()
        return drained


def exporter_build_archive_file_name(now: datetime | None = None) -> str:
    """Build the download file name of a bulk export archive.

    Args:
        now: Optional timestamp; defaults to the current UTC time.

    Returns:
        str: File name such as `config_export_2026_0214_09_30_00.zip`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    timestamp = now or datetime.now(timezone.utc)
    return f"{ARCHIVE_FILE_NAME_PREFIX}{timestamp.strftime(ARCHIVE_TIMESTAMP_FORMAT)}.zip"


def exporter_stream_archive(entries: Iterable[ExportEntry]) -> Iterator[bytes]:
    """Write entries into a zip archive and yield its bytes as they are produced.

    One chunk is yielded per entry, followed by the central directory. Closing
    this generator early also closes the entry producer.

    Args:
        entries: Lazy entries in archive order.

    Returns:
        Iterator[bytes]: Archive byte chunks.

    Raises:
        PortalError: Re-raised when the entry producer fails outside its per-unit isolation.
    """

    buffer = _ArchiveChunkBuffer()
    try:
        with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
            for entry in entries:
                archive.writestr(entry.path, entry.payload)
                chunk = buffer.archive_drain()
                if chunk:
                    yield chunk
        tail = buffer.archive_drain()
        if tail:
            yield tail
    finally:
        close_entries = getattr(entries, "close", None)
        if close_entries is not None:
            close_entries()


class NamespaceExporter:
    """Renders namespaces into files and enumerates bulk export entries."""

    def __init__(
        self,
        app_namespace_repository: AppNamespaceRepositoryPort,
        environment_registry: EnvironmentCatalogRegistry,
        permission_validator: PermissionValidatorPort,
    ):
        """Initialize exporter dependencies.

        Args:
            app_namespace_repository: Metadata store catalog listing applications.
            environment_registry: Registry resolving environment catalog clients.
            permission_validator: Visibility policy evaluated per namespace.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if app_namespace_repository is None:
            raise ValueError("app_namespace_repository must not be None")
        if environment_registry is None:
            raise ValueError("environment_registry must not be None")
        if permission_validator is None:
            raise ValueError("permission_validator must not be None")
        self._app_namespace_repository = app_namespace_repository
        self._environment_registry = environment_registry
        self._permission_validator = permission_validator

    def exporter_export_namespace(
        self,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
        principal: str,
    ) -> tuple[str, bytes]:
        """Render one namespace into a downloadable file.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.
            principal: Requesting principal.

        Returns:
            tuple[str, bytes]: File name and rendered payload.

        Raises:
            NamespaceValidationError: Raised for blank or malformed inputs.
            PermissionDeniedError: Raised when the namespace is hidden from the principal.
            NamespaceNotFoundError: Raised when the namespace instance does not exist.
            NamespaceSerializationError: Raised when the namespace cannot be rendered.
            UpstreamUnavailableError: Raised when a store cannot be reached.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        normalized_cluster_name = validation_require_name(cluster_name, "cluster_name")
        normalized_namespace_name = validation_require_name(namespace_name, "namespace_name")
        normalized_env = self._environment_registry.registry_normalize_env(env)

        if not self._exporter_is_visible(
            principal=principal,
            app_id=normalized_app_id,
            env=normalized_env,
            cluster_name=normalized_cluster_name,
            namespace_name=normalized_namespace_name,
        ):
            raise PermissionDeniedError(
                f"namespace {normalized_namespace_name} is not visible to the current user"
            )

        namespace = self._environment_registry.registry_get_client(normalized_env).catalog_load_namespace(
            app_id=normalized_app_id,
            cluster_name=normalized_cluster_name,
            namespace_name=normalized_namespace_name,
        )
        return serializer_derive_file_name(namespace.namespace_name), serializer_render(namespace)

    def exporter_prepare_export(self, envs: str | Sequence[str]) -> ExportPlan:
        """Validate bulk export inputs before any byte is streamed.

        Args:
            envs: Comma-separated text or a sequence of environment identifiers.

        Returns:
            ExportPlan: Normalized environments and the application ids to export.

        Raises:
            NamespaceValidationError: Raised when no environment is given or one is unknown.
            MetadataStoreUnavailableError: Raised when applications cannot be listed.
        """

        raw_envs = envs.split(",") if isinstance(envs, str) else list(envs)
        normalized_envs: list[str] = []
        for raw_env in raw_envs:
            if not raw_env.strip():
                continue
            normalized_env = self._environment_registry.registry_normalize_env(raw_env)
            if normalized_env not in normalized_envs:
                normalized_envs.append(normalized_env)
        if not normalized_envs:
            raise NamespaceValidationError("at least one env must be requested")

        app_ids = tuple(sorted(self._app_namespace_repository.db_app_id_list()))
        return ExportPlan(envs=tuple(normalized_envs), app_ids=app_ids)

    def exporter_iter_entries(self, plan: ExportPlan, principal: str, report: ExportReport) -> Iterator[ExportEntry]:
        """Lazily enumerate and render every visible namespace of a plan.

        Environments follow request order; applications and clusters are
        sorted. A failing listing skips its (env, app) unit and a failing
        namespace skips only that namespace; both are recorded on `report`.

        Args:
            plan: Prepared export plan.
            principal: Requesting principal.
            report: Accumulator receiving exported paths and failures.

        Returns:
            Iterator[ExportEntry]: Entries in archive order.

        Raises:
            RuntimeError: Per-unit failures are recorded, not raised.
        """

        for env in plan.envs:
            environment_client = self._environment_registry.registry_get_client(env)
            for app_id in plan.app_ids:
                try:
                    cluster_names = sorted(environment_client.catalog_list_cluster_names(app_id))
                except PortalError as error:
                    self._exporter_record_failure(report, env, app_id, None, None, error)
                    continue

                for cluster_name in cluster_names:
                    try:
                        namespaces = environment_client.catalog_list_namespaces(app_id, cluster_name)
                    except PortalError as error:
                        self._exporter_record_failure(report, env, app_id, cluster_name, None, error)
                        continue

                    for namespace_name in sorted(namespace.namespace_name for namespace in namespaces):
                        try:
                            entry = self._exporter_build_entry(
                                principal=principal,
                                app_id=app_id,
                                env=env,
                                cluster_name=cluster_name,
                                namespace_name=namespace_name,
                            )
                        except PortalError as error:
                            self._exporter_record_failure(report, env, app_id, cluster_name, namespace_name, error)
                            continue
                        if entry is None:
                            continue
                        report.report_record_export(entry.path)
                        yield entry

        logger.info(
            "export enumeration finished: envs=%s exported=%d failed=%d",
            ",".join(plan.envs),
            len(report.exported),
            len(report.failures),
        )

    def _exporter_build_entry(
        self,
        principal: str,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
    ) -> ExportEntry | None:
        if not self._exporter_is_visible(
            principal=principal,
            app_id=app_id,
            env=env,
            cluster_name=cluster_name,
            namespace_name=namespace_name,
        ):
            return None

        namespace = self._environment_registry.registry_get_client(env).catalog_load_namespace(
            app_id=app_id,
            cluster_name=cluster_name,
            namespace_name=namespace_name,
        )
        file_name = serializer_derive_file_name(namespace.namespace_name)
        return ExportEntry(
            path=f"{env}/{app_id}/{cluster_name}/{file_name}",
            payload=serializer_render(namespace),
        )

    def _exporter_is_visible(
        self,
        principal: str,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
    ) -> bool:
        if not self._permission_validator.permission_can_read_namespace(
            principal,
            app_id,
            env,
            cluster_name,
            namespace_name,
        ):
            return False
        return not self._permission_validator.permission_should_hide_config(
            principal,
            app_id,
            env,
            cluster_name,
            namespace_name,
        )

    def _exporter_record_failure(
        self,
        report: ExportReport,
        env: str,
        app_id: str,
        cluster_name: str | None,
        namespace_name: str | None,
        error: PortalError,
    ) -> None:
        logger.warning(
            "export skipped: env=%s app_id=%s cluster=%s namespace=%s error_code=%s error=%s",
            env,
            app_id,
            cluster_name,
            namespace_name,
            error.error_code,
            error,
        )
        report.report_record_failure(
            ExportFailure(
                env=env,
                app_id=app_id,
                cluster_name=cluster_name,
                namespace_name=namespace_name,
                error_code=error.error_code,
                message=str(error),
            )
        )
