"""FastAPI application factory for the namespace portal.

This module composes the routers served by the portal runtime.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from portal.adapters import EnvironmentCatalogRegistry
from portal.config import AppSettings
from portal.db import DatabaseHealthPort
from portal.namespaces import (
    AppNamespaceService,
    NamespaceExporter,
    NamespaceProvisioner,
    NamespaceQueryService,
    NamespaceReconciler,
    PermissionValidatorPort,
)

from .routers import (
    api_create_app_namespaces_router,
    api_create_exports_router,
    api_create_health_router,
    api_create_namespaces_router,
)


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    environment_registry: EnvironmentCatalogRegistry,
    app_namespace_service: AppNamespaceService,
    namespace_query_service: NamespaceQueryService,
    namespace_reconciler: NamespaceReconciler,
    namespace_provisioner: NamespaceProvisioner,
    namespace_exporter: NamespaceExporter,
    permission_validator: PermissionValidatorPort,
) -> FastAPI:
    """Create the FastAPI application instance for the portal.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Metadata store health service used by health endpoints.
        environment_registry: Registry of configured environment catalogs.
        app_namespace_service: Declaration lifecycle service.
        namespace_query_service: Namespace instance read service.
        namespace_reconciler: Missing set computation service.
        namespace_provisioner: Missing namespace creation service.
        namespace_exporter: Single and bulk export service.
        permission_validator: Visibility and export policy.

    Returns:
        FastAPI: Framework application instance with all portal routers.

    Raises:
        ValueError: Raised when a router dependency is missing.
    """

    @asynccontextmanager
    async def portal_lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        environment_registry.registry_close()

    application = FastAPI(title="Namespace Portal", lifespan=portal_lifespan)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        return {
            "service": "namespace-portal",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(
        api_create_health_router(
            db_health_service=db_health_service,
            environment_registry=environment_registry,
        )
    )
    application.include_router(api_create_app_namespaces_router(app_namespace_service=app_namespace_service))
    application.include_router(
        api_create_namespaces_router(
            namespace_query_service=namespace_query_service,
            namespace_reconciler=namespace_reconciler,
            namespace_provisioner=namespace_provisioner,
            namespace_exporter=namespace_exporter,
        )
    )
    application.include_router(
        api_create_exports_router(
            namespace_exporter=namespace_exporter,
            permission_validator=permission_validator,
        )
    )

    return application
