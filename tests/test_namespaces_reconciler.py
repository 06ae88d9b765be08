"""Tests for missing namespace computation between metadata and environments."""

from __future__ import annotations

import itertools

import pytest

from catalog_stubs import InMemoryAppNamespaceRepository, InMemoryEnvironmentCatalog, build_registry
from portal.domain import AppNamespace, ConfigFileFormat, NamespaceValidationError, UpstreamUnavailableError
from portal.namespaces import NamespaceReconciler, reconciler_missing_namespace_names


def _build_orderservice_fixture() -> tuple[NamespaceReconciler, InMemoryEnvironmentCatalog]:
    """Create the orderservice scenario with one private and one public declaration.

    Returns:
        tuple[NamespaceReconciler, InMemoryEnvironmentCatalog]: Reconciler and the dev catalog.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    repository = InMemoryAppNamespaceRepository(
        [
            AppNamespace(app_id="orderservice", name="db.yml", format=ConfigFileFormat.YML, is_public=False),
            AppNamespace(app_id="orderservice", name="common", is_public=True),
        ]
    )
    dev_catalog = InMemoryEnvironmentCatalog("dev")
    dev_catalog.catalog_add_declaration(AppNamespace(app_id="orderservice", name="common", is_public=True))
    dev_catalog.catalog_add_declaration(
        AppNamespace(app_id="orderservice", name="db.yml", format=ConfigFileFormat.YML)
    )
    dev_catalog.catalog_add_namespace("orderservice", "default", "application")
    reconciler = NamespaceReconciler(app_namespace_repository=repository, environment_registry=build_registry(dev_catalog))
    return reconciler, dev_catalog


def test_reconciler_orderservice_reports_private_namespace_without_instance() -> None:
    """Report the private namespace that has a declaration but no cluster instance.

    Returns:
        None: Assertions validate the missing set.

    Raises:
        AssertionError: Raised when the missing set is wrong.
    """

    reconciler, _ = _build_orderservice_fixture()

    assert reconciler.reconciler_compute_missing("orderservice", "dev", "default") == {"db.yml"}


def test_reconciler_public_namespace_is_checked_at_declaration_level_only() -> None:
    """A public declaration present in the environment is never missing, even without an instance."""

    reconciler, dev_catalog = _build_orderservice_fixture()
    dev_catalog.catalog_add_namespace("orderservice", "default", "db.yml")

    assert reconciler.reconciler_compute_missing("orderservice", "DEV", " default ") == set()


def test_reconciler_missing_names_match_set_algebra_for_every_small_universe() -> None:
    """Check `(A - E_app) | (A_priv - E_ns)` exhaustively over a three-name universe.

    Returns:
        None: Assertions validate the pure computation.

    Raises:
        AssertionError: Raised when any combination deviates from the formula.
    """

    universe = ("a", "b", "c")
    subsets = [
        set(combination)
        for size in range(len(universe) + 1)
        for combination in itertools.combinations(universe, size)
    ]
    for declared, public, environment_declared, instances in itertools.product(subsets, repeat=4):
        declarations = [
            AppNamespace(app_id="app", name=name, is_public=name in public)
            for name in sorted(declared)
        ]
        private_declared = declared - public

        missing = reconciler_missing_namespace_names(declarations, environment_declared, instances)

        assert missing == (declared - environment_declared) | (private_declared - instances)
        assert missing <= declared


def test_reconciler_rejects_invalid_inputs_before_any_catalog_call() -> None:
    """Raise validation errors without touching either catalog."""

    reconciler, dev_catalog = _build_orderservice_fixture()
    dev_catalog.failing_operations.update({"list_app_namespaces", "list_namespaces"})

    with pytest.raises(NamespaceValidationError):
        reconciler.reconciler_compute_missing(" ", "dev", "default")
    with pytest.raises(NamespaceValidationError):
        reconciler.reconciler_compute_missing("orderservice", "dev", "")
    with pytest.raises(NamespaceValidationError, match="unknown environment"):
        reconciler.reconciler_compute_missing("orderservice", "uat", "default")
    with pytest.raises(NamespaceValidationError) as error_info:
        reconciler.reconciler_compute_missing("orderservice", "dev", "bad cluster!")
    assert error_info.value.error_code == "INVALID_NAME_FORMAT"


@pytest.mark.parametrize("failing_operation", ["list_app_namespaces", "list_namespaces"])
def test_reconciler_fails_whole_when_one_environment_read_fails(failing_operation: str) -> None:
    """Raise an upstream error instead of returning a partial missing set.

    Args:
        failing_operation: Environment catalog read forced to fail.

    Returns:
        None: Assertions validate fail-whole behavior.

    Raises:
        AssertionError: Raised when a partial result escapes.
    """

    reconciler, dev_catalog = _build_orderservice_fixture()
    dev_catalog.failing_operations.add(failing_operation)

    with pytest.raises(UpstreamUnavailableError):
        reconciler.reconciler_compute_missing("orderservice", "dev", "default")


def test_reconciler_fails_whole_when_metadata_store_is_down() -> None:
    repository = InMemoryAppNamespaceRepository([AppNamespace(app_id="orderservice", name="application")])
    repository.fail_reads = True
    reconciler = NamespaceReconciler(
        app_namespace_repository=repository,
        environment_registry=build_registry(InMemoryEnvironmentCatalog("dev")),
    )

    with pytest.raises(UpstreamUnavailableError) as error_info:
        reconciler.reconciler_compute_missing("orderservice", "dev", "default")
    assert error_info.value.error_code == "METADATA_STORE_UNAVAILABLE"
