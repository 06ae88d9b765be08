"""Namespace instance router for drift, provisioning, lookup, usage and single-file export endpoints."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Header, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from portal.domain import PortalError
from portal.namespaces import (
    NamespaceCreationRequest,
    NamespaceExporter,
    NamespaceProvisioner,
    NamespaceQueryService,
    NamespaceReconciler,
)

from .common import (
    PRINCIPAL_HEADER_NAME,
    api_error_response,
    api_missing_principal_response,
    api_serialize_namespace_batch_result,
    api_serialize_namespace_instance,
    api_serialize_namespace_usage,
    api_serialize_namespace_view,
    api_serialize_provisioning_result,
)

CLUSTER_PATH = "/apps/{app_id}/envs/{env}/clusters/{cluster_name}"


class NamespaceInstanceCreateRequest(BaseModel):
    """Request body row for creating one namespace instance."""

    env: str
    cluster_name: str
    namespace_name: str


def api_create_namespaces_router(
    namespace_query_service: NamespaceQueryService,
    namespace_reconciler: NamespaceReconciler,
    namespace_provisioner: NamespaceProvisioner,
    namespace_exporter: NamespaceExporter,
) -> APIRouter:
    """Create router exposing namespace instance APIs of one cluster.

    Args:
        namespace_query_service: Read and linked-delete service.
        namespace_reconciler: Missing set computation service.
        namespace_provisioner: Best-effort namespace creation service.
        namespace_exporter: Single namespace export service.

    Returns:
        APIRouter: Router exposing namespace APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if namespace_query_service is None:
        raise ValueError("namespace_query_service must not be None")
    if namespace_reconciler is None:
        raise ValueError("namespace_reconciler must not be None")
    if namespace_provisioner is None:
        raise ValueError("namespace_provisioner must not be None")
    if namespace_exporter is None:
        raise ValueError("namespace_exporter must not be None")

    router = APIRouter(tags=["namespaces"])

    @router.get(f"{CLUSTER_PATH}/namespaces")
    def api_namespace_list(
        app_id: str,
        env: str,
        cluster_name: str,
        principal: str = Header(default="", alias=PRINCIPAL_HEADER_NAME),
    ) -> JSONResponse:
        """Return namespace instances of one cluster with hidden items masked.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.
            principal: Requesting principal from the portal user header.

        Returns:
            JSONResponse: Namespace list payload or error envelope.

        Raises:
            RuntimeError: Raised when the response cannot be produced.
        """

        if not principal.strip():
            return api_missing_principal_response()
        try:
            namespace_views = namespace_query_service.queries_list_namespaces(
                app_id=app_id,
                env=env,
                cluster_name=cluster_name,
                principal=principal,
            )
        except PortalError as error:
            return api_error_response(error)
        payload = {"items": [api_serialize_namespace_view(namespace_view) for namespace_view in namespace_views]}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get(f"{CLUSTER_PATH}/namespaces/{{namespace_name}}")
    def api_namespace_detail(
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
        principal: str = Header(default="", alias=PRINCIPAL_HEADER_NAME),
    ) -> JSONResponse:
        if not principal.strip():
            return api_missing_principal_response()
        try:
            namespace_view = namespace_query_service.queries_get_namespace(
                app_id=app_id,
                env=env,
                cluster_name=cluster_name,
                namespace_name=namespace_name,
                principal=principal,
            )
        except PortalError as error:
            return api_error_response(error)
        return JSONResponse(content=api_serialize_namespace_view(namespace_view), status_code=status.HTTP_200_OK)

    @router.get(f"{CLUSTER_PATH}/missing-namespaces")
    def api_namespace_missing_list(app_id: str, env: str, cluster_name: str) -> JSONResponse:
        """Return app namespaces declared in metadata but absent from the cluster.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.

        Returns:
            JSONResponse: Sorted missing names; 503 when any catalog read fails.

        Raises:
            RuntimeError: Raised when the response cannot be produced.
        """

        try:
            missing_names = namespace_reconciler.reconciler_compute_missing(
                app_id=app_id,
                env=env,
                cluster_name=cluster_name,
            )
        except PortalError as error:
            return api_error_response(error)
        return JSONResponse(content={"items": sorted(missing_names)}, status_code=status.HTTP_200_OK)

    @router.post(f"{CLUSTER_PATH}/missing-namespaces")
    def api_namespace_missing_create(app_id: str, env: str, cluster_name: str) -> JSONResponse:
        """Create every missing namespace of the cluster, best effort.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.

        Returns:
            JSONResponse: Created names and per-name failures; 207 when some failed.

        Raises:
            RuntimeError: Raised when the response cannot be produced.
        """

        try:
            result = namespace_provisioner.provisioner_create_missing(
                app_id=app_id,
                env=env,
                cluster_name=cluster_name,
            )
        except PortalError as error:
            return api_error_response(error)
        status_code = status.HTTP_200_OK if result.provisioning_is_complete() else status.HTTP_207_MULTI_STATUS
        return JSONResponse(content=api_serialize_provisioning_result(result), status_code=status_code)

    @router.delete(f"{CLUSTER_PATH}/linked-namespaces/{{namespace_name}}")
    def api_namespace_linked_delete(
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
        principal: str = Header(default="", alias=PRINCIPAL_HEADER_NAME),
    ) -> JSONResponse:
        if not principal.strip():
            return api_missing_principal_response()
        try:
            namespace_query_service.queries_delete_linked_namespace(
                app_id=app_id,
                env=env,
                cluster_name=cluster_name,
                namespace_name=namespace_name,
                operator=principal,
            )
        except PortalError as error:
            return api_error_response(error)
        return JSONResponse(content={"status": "deleted"}, status_code=status.HTTP_200_OK)

    @router.get("/apps/{app_id}/namespaces/{namespace_name}/usage")
    def api_namespace_usage(app_id: str, namespace_name: str) -> JSONResponse:
        try:
            usages = namespace_query_service.queries_namespace_usage(app_id=app_id, namespace_name=namespace_name)
        except PortalError as error:
            return api_error_response(error)
        payload = {"items": [api_serialize_namespace_usage(usage) for usage in usages]}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get(f"{CLUSTER_PATH}/namespaces/{{namespace_name}}/items/export")
    def api_namespace_export(
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
        principal: str = Header(default="", alias=PRINCIPAL_HEADER_NAME),
    ) -> Response:
        """Download one namespace as a configuration file.

        Args:
            app_id: Application identifier.
            env: Environment identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.
            principal: Requesting principal from the portal user header.

        Returns:
            Response: File attachment or error envelope.

        Raises:
            RuntimeError: Raised when the response cannot be produced.
        """

        if not principal.strip():
            return api_missing_principal_response()
        try:
            file_name, payload = namespace_exporter.exporter_export_namespace(
                app_id=app_id,
                env=env,
                cluster_name=cluster_name,
                namespace_name=namespace_name,
                principal=principal,
            )
        except PortalError as error:
            return api_error_response(error)
        return Response(
            content=payload,
            media_type="application/octet-stream",
            headers={"Content-Disposition": api_content_disposition(file_name)},
        )

    @router.post("/apps/{app_id}/namespaces")
    def api_namespace_batch_create(
        app_id: str,
        requests: list[NamespaceInstanceCreateRequest],
        principal: str = Header(default="", alias=PRINCIPAL_HEADER_NAME),
    ) -> JSONResponse:
        """Create namespace instances across environments and clusters, best effort.

        Args:
            app_id: Application identifier.
            requests: Instances to create.
            principal: Requesting principal from the portal user header.

        Returns:
            JSONResponse: Created instances and per-instance failures; 207 when some failed.

        Raises:
            RuntimeError: Raised when the response cannot be produced.
        """

        if not principal.strip():
            return api_missing_principal_response()
        try:
            result = namespace_provisioner.provisioner_create_namespaces(
                app_id=app_id,
                requests=[
                    NamespaceCreationRequest(
                        env=request.env,
                        cluster_name=request.cluster_name,
                        namespace_name=request.namespace_name,
                    )
                    for request in requests
                ],
                operator=principal,
            )
        except PortalError as error:
            return api_error_response(error)
        status_code = status.HTTP_200_OK if result.batch_is_complete() else status.HTTP_207_MULTI_STATUS
        return JSONResponse(content=api_serialize_namespace_batch_result(result), status_code=status_code)

    @router.get(f"{CLUSTER_PATH}/linked-namespaces/{{namespace_name}}/usage")
    def api_namespace_linked_usage(app_id: str, env: str, cluster_name: str, namespace_name: str) -> JSONResponse:
        try:
            usages = namespace_query_service.queries_namespace_usage_by_env(
                app_id=app_id,
                env=env,
                cluster_name=cluster_name,
                namespace_name=namespace_name,
            )
        except PortalError as error:
            return api_error_response(error)
        payload = {"items": [api_serialize_namespace_usage(usage) for usage in usages]}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/envs/{env}/apps/{app_id}/clusters/{cluster_name}/namespaces/{namespace_name}/associated-public-namespace")
    def api_namespace_associated_public(
        env: str,
        app_id: str,
        cluster_name: str,
        namespace_name: str,
        principal: str = Header(default="", alias=PRINCIPAL_HEADER_NAME),
    ) -> JSONResponse:
        """Return the public namespace a linked namespace of the app inherits from.

        Args:
            env: Environment identifier.
            app_id: Linking application identifier.
            cluster_name: Cluster of the linking application.
            namespace_name: Public namespace name.
            principal: Requesting principal from the portal user header.

        Returns:
            JSONResponse: Owner namespace payload or error envelope.

        Raises:
            RuntimeError: Raised when the response cannot be produced.
        """

        if not principal.strip():
            return api_missing_principal_response()
        try:
            namespace_view = namespace_query_service.queries_find_associated_public_namespace(
                app_id=app_id,
                env=env,
                cluster_name=cluster_name,
                namespace_name=namespace_name,
                principal=principal,
            )
        except PortalError as error:
            return api_error_response(error)
        return JSONResponse(content=api_serialize_namespace_view(namespace_view), status_code=status.HTTP_200_OK)

    @router.get("/envs/{env}/appnamespaces/{namespace_name}/namespaces")
    def api_namespace_public_instances(env: str, namespace_name: str, page: int = 0, size: int = 10) -> JSONResponse:
        try:
            namespaces = namespace_query_service.queries_list_public_namespace_instances(
                env=env,
                public_namespace_name=namespace_name,
                page=page,
                size=size,
            )
        except PortalError as error:
            return api_error_response(error)
        payload = {
            "page": page,
            "size": size,
            "items": [api_serialize_namespace_instance(namespace) for namespace in namespaces],
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router


def api_content_disposition(file_name: str) -> str:
    return f"attachment; filename*=UTF-8''{quote(file_name)}"
