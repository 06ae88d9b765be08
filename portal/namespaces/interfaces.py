"""Typed result contracts for namespace reconciliation, provisioning and export."""

from __future__ import annotations

from dataclasses import dataclass, field

from portal.domain import Namespace


@dataclass(frozen=True)
class ProvisioningFailure:
    """One namespace that could not be provisioned.

    Attributes:
        namespace_name: Missing namespace name.
        error_code: Stable error code of the failure.
        message: Human-readable failure cause.
    """

    namespace_name: str
    error_code: str
    message: str


@dataclass(frozen=True)
class ProvisioningResult:
    """Aggregate outcome of one best-effort provisioning batch.

    Attributes:
        app_id: Application identifier.
        env: Normalized environment identifier.
        cluster_name: Cluster name.
        created: Namespace names created in this batch.
        failures: Namespace names that failed, with causes.
    """

    app_id: str
    env: str
    cluster_name: str
    created: tuple[str, ...]
    failures: tuple[ProvisioningFailure, ...]

    def provisioning_is_complete(self) -> bool:
        """Return whether every missing namespace was created.

        Returns:
            bool: True when no failure was recorded.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return not self.failures


@dataclass(frozen=True)
class NamespaceCreationRequest:
    """One namespace instance to create in an environment cluster."""

    env: str
    cluster_name: str
    namespace_name: str


@dataclass(frozen=True)
class NamespaceCreationFailure:
    """One requested namespace instance that could not be created.

    Attributes:
        request: Normalized creation request.
        error_code: Stable error code of the failure.
        message: Human-readable failure cause.
    """

    request: NamespaceCreationRequest
    error_code: str
    message: str


@dataclass(frozen=True)
class NamespaceBatchResult:
    """Aggregate outcome of one best-effort namespace instance batch.

    Attributes:
        app_id: Application identifier.
        created: Requests whose instance was created, in request order.
        failures: Requests that failed, with causes.
    """

    app_id: str
    created: tuple[NamespaceCreationRequest, ...]
    failures: tuple[NamespaceCreationFailure, ...]

    def batch_is_complete(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class NamespaceView:
    """Namespace instance as shown to one principal.

    Attributes:
        namespace: Namespace instance; items are empty when hidden.
        items_hidden: Whether items were withheld by the view policy.
    """

    namespace: Namespace
    items_hidden: bool


@dataclass(frozen=True)
class ExportEntry:
    """One file of an export archive.

    Attributes:
        path: Archive member path.
        payload: Rendered file bytes.
    """

    path: str
    payload: bytes


@dataclass(frozen=True)
class ExportFailure:
    """One export unit that was skipped because it failed.

    Attributes:
        env: Environment identifier.
        app_id: Application identifier.
        cluster_name: Cluster name, or None when cluster listing failed.
        namespace_name: Namespace name, or None when a listing failed.
        error_code: Stable error code of the failure.
        message: Human-readable failure cause.
    """

    env: str
    app_id: str
    cluster_name: str | None
    namespace_name: str | None
    error_code: str
    message: str


@dataclass(frozen=True)
class ExportPlan:
    """Validated inputs of one bulk export, resolved before streaming starts.

    Attributes:
        envs: Normalized environments in request order.
        app_ids: Application identifiers read from the metadata store.
    """

    envs: tuple[str, ...]
    app_ids: tuple[str, ...]


@dataclass
class ExportReport:
    """Mutable accumulator filled while an export stream is consumed.

    Attributes:
        exported: Archive paths written so far.
        failures: Units skipped so far.
    """

    exported: list[str] = field(default_factory=list)
    failures: list[ExportFailure] = field(default_factory=list)

    def report_record_export(self, path: str) -> None:
        self.exported.append(path)

    def report_record_failure(self, failure: ExportFailure) -> None:
        self.failures.append(failure)
