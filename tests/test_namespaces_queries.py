"""Tests for namespace reads, visibility masking, usage and linked namespace deletion."""

from __future__ import annotations

import pytest

from catalog_stubs import (
    InMemoryAppNamespaceRepository,
    InMemoryEnvironmentCatalog,
    StaticPermissionValidator,
    build_registry,
)
from portal.domain import (
    AppNamespace,
    NamespaceItem,
    NamespaceNotFoundError,
    NamespaceUsage,
    NamespaceValidationError,
    PermissionDeniedError,
)
from portal.namespaces import NamespaceQueryService, SettingsPermissionValidator


def _build_catalogs() -> tuple[InMemoryEnvironmentCatalog, InMemoryEnvironmentCatalog]:
    dev_catalog = InMemoryEnvironmentCatalog("dev")
    dev_catalog.catalog_add_namespace("orderservice", "default", "application", [NamespaceItem(key="k", value="v")])
    dev_catalog.catalog_add_namespace("orderservice", "default", "secrets", [NamespaceItem(key="pwd", value="x")])
    dev_catalog.catalog_add_namespace("orderservice", "shanghai", "application")
    pro_catalog = InMemoryEnvironmentCatalog("pro")
    pro_catalog.catalog_add_namespace("orderservice", "default", "secrets", [NamespaceItem(key="pwd", value="x")])
    return dev_catalog, pro_catalog


def test_queries_list_namespaces_masks_hidden_items_and_omits_unreadable() -> None:
    """Return readable namespaces sorted by name with hidden items withheld.

    Returns:
        None: Assertions validate visibility handling.

    Raises:
        AssertionError: Raised when hidden items leak.
    """

    dev_catalog, pro_catalog = _build_catalogs()
    dev_catalog.catalog_add_namespace("orderservice", "default", "internal")
    service = NamespaceQueryService(
        environment_registry=build_registry(dev_catalog, pro_catalog),
        permission_validator=StaticPermissionValidator(
            hidden_namespace_names={"secrets"},
            unreadable_namespace_names={"internal"},
        ),
        app_namespace_repository=InMemoryAppNamespaceRepository(),
    )

    views = service.queries_list_namespaces("orderservice", "Dev", "default", "viewer")

    assert [view.namespace.namespace_name for view in views] == ["application", "secrets"]
    assert views[0].items_hidden is False
    assert views[0].namespace.items == (NamespaceItem(key="k", value="v"),)
    assert views[1].items_hidden is True
    assert views[1].namespace.items == ()


def test_queries_get_namespace_applies_member_only_policy() -> None:
    """Hide private items in member-only environments unless the principal is a super admin.

    Returns:
        None: Assertions validate the settings-backed policy.

    Raises:
        AssertionError: Raised when the policy is not applied.
    """

    dev_catalog, pro_catalog = _build_catalogs()
    pro_catalog.catalog_add_namespace("orderservice", "default", "common", [NamespaceItem(key="k", value="v")])
    repository = InMemoryAppNamespaceRepository(
        [
            AppNamespace(app_id="orderservice", name="secrets"),
            AppNamespace(app_id="platform", name="common", is_public=True),
        ]
    )
    service = NamespaceQueryService(
        environment_registry=build_registry(dev_catalog, pro_catalog),
        permission_validator=SettingsPermissionValidator(
            app_namespace_repository=repository,
            super_admin_users=["root"],
            member_only_envs=["PRO"],
        ),
        app_namespace_repository=repository,
    )

    assert service.queries_get_namespace("orderservice", "pro", "default", "secrets", "viewer").items_hidden is True
    assert service.queries_get_namespace("orderservice", "pro", "default", "secrets", "root").items_hidden is False
    assert service.queries_get_namespace("orderservice", "dev", "default", "secrets", "viewer").items_hidden is False
    # common is owned by another app but public, so it stays visible.
    assert service.queries_get_namespace("orderservice", "pro", "default", "common", "viewer").items_hidden is False


def test_queries_get_namespace_errors() -> None:
    dev_catalog, pro_catalog = _build_catalogs()
    service = NamespaceQueryService(
        environment_registry=build_registry(dev_catalog, pro_catalog),
        permission_validator=StaticPermissionValidator(unreadable_namespace_names={"secrets"}),
        app_namespace_repository=InMemoryAppNamespaceRepository(),
    )

    with pytest.raises(PermissionDeniedError):
        service.queries_get_namespace("orderservice", "dev", "default", "secrets", "viewer")
    with pytest.raises(NamespaceNotFoundError):
        service.queries_get_namespace("orderservice", "dev", "default", "absent", "viewer")
    with pytest.raises(NamespaceValidationError):
        service.queries_get_namespace("orderservice", "qa", "default", "application", "viewer")


def test_queries_namespace_usage_covers_every_environment_and_cluster() -> None:
    dev_catalog, pro_catalog = _build_catalogs()
    service = NamespaceQueryService(
        environment_registry=build_registry(dev_catalog, pro_catalog),
        permission_validator=StaticPermissionValidator(),
        app_namespace_repository=InMemoryAppNamespaceRepository(),
    )

    usages = service.queries_namespace_usage("orderservice", "application")

    assert usages == [
        NamespaceUsage("orderservice", "application", "dev", "default", True),
        NamespaceUsage("orderservice", "application", "dev", "shanghai", True),
        NamespaceUsage("orderservice", "application", "pro", "default", False),
    ]


def test_queries_delete_linked_namespace_only_removes_public_instances() -> None:
    """Delete a linked public namespace instance and refuse private own namespaces.

    Returns:
        None: Assertions validate linked deletion rules.

    Raises:
        AssertionError: Raised when a private namespace can be unlinked.
    """

    dev_catalog, pro_catalog = _build_catalogs()
    dev_catalog.catalog_add_namespace("orderservice", "default", "common")
    repository = InMemoryAppNamespaceRepository(
        [
            AppNamespace(app_id="orderservice", name="secrets"),
            AppNamespace(app_id="platform", name="common", is_public=True),
        ]
    )
    service = NamespaceQueryService(
        environment_registry=build_registry(dev_catalog, pro_catalog),
        permission_validator=StaticPermissionValidator(),
        app_namespace_repository=repository,
    )

    service.queries_delete_linked_namespace("orderservice", "dev", "default", "common", "alice")

    assert dev_catalog.delete_calls == [("orderservice", "default", "common", "alice")]
    assert "common" not in dev_catalog.instances[("orderservice", "default")]
    with pytest.raises(NamespaceValidationError) as error_info:
        service.queries_delete_linked_namespace("orderservice", "dev", "default", "secrets", "alice")
    assert error_info.value.error_code == "NOT_LINKED_NAMESPACE"
    with pytest.raises(NamespaceNotFoundError, match="public app namespace not found"):
        service.queries_delete_linked_namespace("orderservice", "dev", "default", "tracing", "alice")
    assert len(dev_catalog.delete_calls) == 1


def test_queries_namespace_usage_by_env_reports_one_cluster() -> None:
    dev_catalog, pro_catalog = _build_catalogs()
    service = NamespaceQueryService(
        environment_registry=build_registry(dev_catalog, pro_catalog),
        permission_validator=StaticPermissionValidator(),
        app_namespace_repository=InMemoryAppNamespaceRepository(),
    )

    assert service.queries_namespace_usage_by_env("orderservice", "DEV", "shanghai", "application") == [
        NamespaceUsage("orderservice", "application", "dev", "shanghai", True)
    ]
    assert service.queries_namespace_usage_by_env("orderservice", "pro", "default", "application") == [
        NamespaceUsage("orderservice", "application", "pro", "default", False)
    ]
    with pytest.raises(NamespaceValidationError):
        service.queries_namespace_usage_by_env("orderservice", "dev", "bad cluster", "application")


def test_queries_find_associated_public_namespace_reads_owner_cluster() -> None:
    """Load the owner's public namespace from the same cluster, falling back to default.

    Returns:
        None: Assertions validate owner cluster resolution and masking.

    Raises:
        AssertionError: Raised when the wrong instance is loaded.
    """

    dev_catalog, pro_catalog = _build_catalogs()
    dev_catalog.catalog_add_namespace("platform", "default", "common", [NamespaceItem(key="region", value="any")])
    dev_catalog.catalog_add_namespace("platform", "shanghai", "common", [NamespaceItem(key="region", value="sh")])
    repository = InMemoryAppNamespaceRepository([AppNamespace(app_id="platform", name="common", is_public=True)])
    service = NamespaceQueryService(
        environment_registry=build_registry(dev_catalog, pro_catalog),
        permission_validator=StaticPermissionValidator(hidden_namespace_names={"common"}),
        app_namespace_repository=repository,
    )

    same_cluster_view = service.queries_find_associated_public_namespace(
        "orderservice", "dev", "shanghai", "common", "admin"
    )
    fallback_view = service.queries_find_associated_public_namespace(
        "orderservice", "dev", "beijing", "common", "admin"
    )
    hidden_view = service.queries_find_associated_public_namespace(
        "orderservice", "dev", "default", "common", "viewer"
    )

    assert same_cluster_view.namespace.app_id == "platform"
    assert same_cluster_view.namespace.items == (NamespaceItem(key="region", value="sh"),)
    assert fallback_view.namespace.cluster_name == "default"
    assert fallback_view.namespace.items == (NamespaceItem(key="region", value="any"),)
    assert hidden_view.items_hidden is True
    with pytest.raises(NamespaceNotFoundError, match="public app namespace not found"):
        service.queries_find_associated_public_namespace("orderservice", "dev", "default", "secrets", "admin")
    with pytest.raises(NamespaceNotFoundError):
        service.queries_find_associated_public_namespace("orderservice", "pro", "default", "common", "admin")


def test_queries_list_public_namespace_instances_pages_linked_apps() -> None:
    """Page through every application's instance of a public namespace.

    Returns:
        None: Assertions validate paging and validation.

    Raises:
        AssertionError: Raised when paging or validation is wrong.
    """

    dev_catalog, pro_catalog = _build_catalogs()
    for app_id in ("billing", "orderservice", "platform"):
        dev_catalog.catalog_add_namespace(app_id, "default", "common")
    repository = InMemoryAppNamespaceRepository(
        [
            AppNamespace(app_id="platform", name="common", is_public=True),
            AppNamespace(app_id="orderservice", name="secrets"),
        ]
    )
    service = NamespaceQueryService(
        environment_registry=build_registry(dev_catalog, pro_catalog),
        permission_validator=StaticPermissionValidator(),
        app_namespace_repository=repository,
    )

    first_page = service.queries_list_public_namespace_instances("dev", "common", page=0, size=2)
    second_page = service.queries_list_public_namespace_instances("dev", "common", page=1, size=2)

    assert [namespace.app_id for namespace in first_page] == ["billing", "orderservice"]
    assert [namespace.app_id for namespace in second_page] == ["platform"]
    assert service.queries_list_public_namespace_instances("pro", "common") == []
    with pytest.raises(NamespaceNotFoundError):
        service.queries_list_public_namespace_instances("dev", "secrets")
    with pytest.raises(NamespaceValidationError, match="page"):
        service.queries_list_public_namespace_instances("dev", "common", page=-1)
    with pytest.raises(NamespaceValidationError, match="size"):
        service.queries_list_public_namespace_instances("dev", "common", size=0)
