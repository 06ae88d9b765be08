"""Health endpoint router composition for app and metadata store checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from portal.adapters import EnvironmentCatalogRegistry
from portal.db import DatabaseHealthPort


def api_create_health_router(
    db_health_service: DatabaseHealthPort,
    environment_registry: EnvironmentCatalogRegistry,
) -> APIRouter:
    """Create health-check router reporting metadata store connectivity.

    Args:
        db_health_service: DB-layer health service interface.
        environment_registry: Registry listing configured environments.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")
    if environment_registry is None:
        raise ValueError("environment_registry must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and metadata store health state.

        Returns:
            JSONResponse: Health payload; 503 when the metadata store is down or unmigrated.

        Raises:
            RuntimeError: Raised if the response cannot be produced.
        """

        payload = {
            "app": "up",
            "target": db_health_service.db_connection_label(),
            "environments": list(environment_registry.registry_environment_names()),
        }
        try:
            db_health = db_health_service.db_check_health()
        except ConnectionError as error:
            payload.update({"status": "degraded", "metadata_store": "down", "detail": str(error)})
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        payload.update({"metadata_store": db_health.status, "detail": db_health.detail})
        if db_health.status != "ok":
            payload["status"] = "degraded"
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        payload["status"] = "ok"
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
