"""Shared response helpers for portal routers."""

from __future__ import annotations

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from portal.domain import (
    AppNamespace,
    AppNamespaceConflictError,
    Namespace,
    NamespaceNotFoundError,
    NamespaceSerializationError,
    NamespaceUsage,
    NamespaceValidationError,
    PermissionDeniedError,
    PortalError,
    UpstreamUnavailableError,
)
from portal.namespaces import NamespaceBatchResult, NamespaceView, ProvisioningResult

PRINCIPAL_HEADER_NAME = "X-Portal-User"

_ERROR_STATUS_CODES: tuple[tuple[type[PortalError], int], ...] = (
    (NamespaceNotFoundError, status.HTTP_404_NOT_FOUND),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (AppNamespaceConflictError, status.HTTP_409_CONFLICT),
    (NamespaceSerializationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NamespaceValidationError, status.HTTP_400_BAD_REQUEST),
    (UpstreamUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def api_error_status_code(error: PortalError) -> int:
    """Map a domain error onto its HTTP status code.

    Args:
        error: Domain error raised by a service.

    Returns:
        int: HTTP status code; 500 for unmapped errors.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    for error_type, status_code in _ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def api_error_response(error: PortalError) -> JSONResponse:
    payload = {
        "status": "error",
        "code": error.error_code,
        "message": str(error),
    }
    return JSONResponse(content=payload, status_code=api_error_status_code(error))


def api_missing_principal_response() -> JSONResponse:
    payload = {
        "status": "error",
        "code": "MISSING_PRINCIPAL",
        "message": f"{PRINCIPAL_HEADER_NAME} header is required",
    }
    return JSONResponse(content=payload, status_code=status.HTTP_401_UNAUTHORIZED)


def api_serialize_app_namespace(app_namespace: AppNamespace) -> dict[str, Any]:
    return {
        "app_id": app_namespace.app_id,
        "name": app_namespace.name,
        "format": app_namespace.format.value,
        "is_public": app_namespace.is_public,
        "comment": app_namespace.comment,
    }


def api_serialize_namespace_view(namespace_view: NamespaceView) -> dict[str, Any]:
    """Serialize a namespace view into a JSON payload.

    Args:
        namespace_view: Namespace as shown to the requesting principal.

    Returns:
        dict[str, Any]: JSON-serializable namespace payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    namespace = namespace_view.namespace
    return {
        "app_id": namespace.app_id,
        "env": namespace.env,
        "cluster_name": namespace.cluster_name,
        "namespace_name": namespace.namespace_name,
        "format": namespace.format.value,
        "items_hidden": namespace_view.items_hidden,
        "items": [
            {
                "key": item.key,
                "value": item.value,
                "comment": item.comment,
                "line_num": item.line_num,
            }
            for item in namespace.namespace_sorted_items()
        ],
    }


def api_serialize_namespace_usage(usage: NamespaceUsage) -> dict[str, Any]:
    return {
        "app_id": usage.app_id,
        "namespace_name": usage.namespace_name,
        "env": usage.env,
        "cluster_name": usage.cluster_name,
        "provisioned": usage.provisioned,
    }


def api_serialize_provisioning_result(result: ProvisioningResult) -> dict[str, Any]:
    return {
        "app_id": result.app_id,
        "env": result.env,
        "cluster_name": result.cluster_name,
        "complete": result.provisioning_is_complete(),
        "created": list(result.created),
        "failures": [
            {
                "namespace_name": failure.namespace_name,
                "code": failure.error_code,
                "message": failure.message,
            }
            for failure in result.failures
        ],
    }


def api_serialize_namespace_instance(namespace: Namespace) -> dict[str, Any]:
    return {
        "app_id": namespace.app_id,
        "env": namespace.env,
        "cluster_name": namespace.cluster_name,
        "namespace_name": namespace.namespace_name,
        "format": namespace.format.value,
    }


def api_serialize_namespace_batch_result(result: NamespaceBatchResult) -> dict[str, Any]:
    """Serialize a namespace instance batch outcome into a JSON payload.

    Args:
        result: Best-effort batch outcome.

    Returns:
        dict[str, Any]: Created requests and per-request failures.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "app_id": result.app_id,
        "complete": result.batch_is_complete(),
        "created": [
            {"env": request.env, "cluster_name": request.cluster_name, "namespace_name": request.namespace_name}
            for request in result.created
        ],
        "failures": [
            {
                "env": failure.request.env,
                "cluster_name": failure.request.cluster_name,
                "namespace_name": failure.request.namespace_name,
                "code": failure.error_code,
                "message": failure.message,
            }
            for failure in result.failures
        ],
    }
