"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI

from portal.adapters import EnvironmentCatalogRegistry, adapter_create_environment_registry
from portal.api import create_api_application
from portal.config import AppSettings, config_load_settings
from portal.db import SQLAlchemyAppNamespaceService, SQLAlchemyDatabaseHealthService, db_create_engine
from portal.namespaces import (
    AppNamespaceEventPublisher,
    AppNamespaceService,
    NamespaceExporter,
    NamespaceProvisioner,
    NamespaceQueryService,
    NamespaceReconciler,
    SettingsPermissionValidator,
    events_log_listener,
)


@dataclass(frozen=True)
class PortalServices:
    """Fully wired service graph shared by the HTTP and CLI surfaces.

    Attributes:
        settings: Validated runtime settings.
        db_health_service: Metadata store health service.
        environment_registry: Catalog clients per configured environment.
        permission_validator: Visibility and export policy.
        app_namespace_service: Declaration lifecycle service.
        namespace_query_service: Namespace instance read service.
        namespace_reconciler: Missing set computation service.
        namespace_provisioner: Missing namespace creation service.
        namespace_exporter: Single and bulk export service.
    """

    settings: AppSettings
    db_health_service: SQLAlchemyDatabaseHealthService
    environment_registry: EnvironmentCatalogRegistry
    permission_validator: SettingsPermissionValidator
    app_namespace_service: AppNamespaceService
    namespace_query_service: NamespaceQueryService
    namespace_reconciler: NamespaceReconciler
    namespace_provisioner: NamespaceProvisioner
    namespace_exporter: NamespaceExporter


def bootstrap_create_services(settings: AppSettings | None = None) -> PortalServices:
    """Assemble the service graph after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings; loaded from the environment when omitted.

    Returns:
        PortalServices: Wired services.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    engine = db_create_engine(database_url=resolved_settings.database_url)
    app_namespace_repository = SQLAlchemyAppNamespaceService(engine=engine)
    environment_registry = adapter_create_environment_registry(
        environment_endpoints=resolved_settings.environment_endpoints,
        request_timeout_seconds=resolved_settings.environment_request_timeout_seconds,
    )
    permission_validator = SettingsPermissionValidator(
        app_namespace_repository=app_namespace_repository,
        super_admin_users=resolved_settings.super_admin_users,
        member_only_envs=resolved_settings.config_view_member_only_envs,
    )
    event_publisher = AppNamespaceEventPublisher()
    event_publisher.events_subscribe(events_log_listener)
    namespace_reconciler = NamespaceReconciler(
        app_namespace_repository=app_namespace_repository,
        environment_registry=environment_registry,
    )
    return PortalServices(
        settings=resolved_settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        environment_registry=environment_registry,
        permission_validator=permission_validator,
        app_namespace_service=AppNamespaceService(
            app_namespace_repository=app_namespace_repository,
            event_publisher=event_publisher,
        ),
        namespace_query_service=NamespaceQueryService(
            environment_registry=environment_registry,
            permission_validator=permission_validator,
            app_namespace_repository=app_namespace_repository,
        ),
        namespace_reconciler=namespace_reconciler,
        namespace_provisioner=NamespaceProvisioner(
            reconciler=namespace_reconciler,
            app_namespace_repository=app_namespace_repository,
            environment_registry=environment_registry,
        ),
        namespace_exporter=NamespaceExporter(
            app_namespace_repository=app_namespace_repository,
            environment_registry=environment_registry,
            permission_validator=permission_validator,
        ),
    )


def bootstrap_create_application(services: PortalServices | None = None) -> FastAPI:
    """Assemble the runtime application.

    Args:
        services: Optional pre-built service graph.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_services = services or bootstrap_create_services()
    return create_api_application(
        settings=resolved_services.settings,
        db_health_service=resolved_services.db_health_service,
        environment_registry=resolved_services.environment_registry,
        app_namespace_service=resolved_services.app_namespace_service,
        namespace_query_service=resolved_services.namespace_query_service,
        namespace_reconciler=resolved_services.namespace_reconciler,
        namespace_provisioner=resolved_services.namespace_provisioner,
        namespace_exporter=resolved_services.namespace_exporter,
        permission_validator=resolved_services.permission_validator,
    )
