"""App namespace declaration router for metadata store catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Header, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from portal.domain import PortalError
from portal.namespaces import AppNamespaceService

from .common import (
    PRINCIPAL_HEADER_NAME,
    api_error_response,
    api_missing_principal_response,
    api_serialize_app_namespace,
)


class AppNamespaceCreateRequest(BaseModel):
    """Request body for declaring a new app namespace."""

    name: str = Field(min_length=1)
    format: str = "properties"
    is_public: bool = False
    comment: str = ""


def api_create_app_namespaces_router(app_namespace_service: AppNamespaceService) -> APIRouter:
    """Create router exposing declaration list, lookup, create and delete endpoints.

    Args:
        app_namespace_service: Declaration lifecycle service.

    Returns:
        APIRouter: Router exposing app namespace APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if app_namespace_service is None:
        raise ValueError("app_namespace_service must not be None")

    router = APIRouter(tags=["app-namespaces"])

    @router.get("/appnamespaces/public")
    def api_app_namespace_list_public() -> JSONResponse:
        try:
            app_namespaces = app_namespace_service.declarations_list_public()
        except PortalError as error:
            return api_error_response(error)
        payload = {"items": [api_serialize_app_namespace(app_namespace) for app_namespace in app_namespaces]}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/apps/{app_id}/appnamespaces")
    def api_app_namespace_list(app_id: str) -> JSONResponse:
        try:
            app_namespaces = app_namespace_service.declarations_list_by_app(app_id)
        except PortalError as error:
            return api_error_response(error)
        payload = {"items": [api_serialize_app_namespace(app_namespace) for app_namespace in app_namespaces]}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/apps/{app_id}/appnamespaces/{namespace_name}")
    def api_app_namespace_detail(app_id: str, namespace_name: str) -> JSONResponse:
        """Return one declaration.

        Args:
            app_id: Application identifier.
            namespace_name: Full namespace name.

        Returns:
            JSONResponse: Declaration payload or error envelope.

        Raises:
            RuntimeError: Raised when the response cannot be produced.
        """

        try:
            app_namespace = app_namespace_service.declarations_find(app_id=app_id, namespace_name=namespace_name)
        except PortalError as error:
            return api_error_response(error)
        return JSONResponse(content=api_serialize_app_namespace(app_namespace), status_code=status.HTTP_200_OK)

    @router.post("/apps/{app_id}/appnamespaces")
    def api_app_namespace_create(
        app_id: str,
        request: AppNamespaceCreateRequest,
        principal: str = Header(default="", alias=PRINCIPAL_HEADER_NAME),
    ) -> JSONResponse:
        """Create one declaration and notify listeners.

        Args:
            app_id: Owning application identifier.
            request: Declaration payload.
            principal: Requesting principal from the portal user header.

        Returns:
            JSONResponse: Created declaration payload with 201 status.

        Raises:
            RuntimeError: Raised when the response cannot be produced.
        """

        if not principal.strip():
            return api_missing_principal_response()
        try:
            created = app_namespace_service.declarations_create(
                app_id=app_id,
                name=request.name,
                file_format=request.format,
                is_public=request.is_public,
                comment=request.comment,
                operator=principal,
            )
        except PortalError as error:
            return api_error_response(error)
        return JSONResponse(content=api_serialize_app_namespace(created), status_code=status.HTTP_201_CREATED)

    @router.delete("/apps/{app_id}/appnamespaces/{namespace_name}")
    def api_app_namespace_delete(
        app_id: str,
        namespace_name: str,
        principal: str = Header(default="", alias=PRINCIPAL_HEADER_NAME),
    ) -> JSONResponse:
        if not principal.strip():
            return api_missing_principal_response()
        try:
            deleted = app_namespace_service.declarations_delete(
                app_id=app_id,
                namespace_name=namespace_name,
                operator=principal,
            )
        except PortalError as error:
            return api_error_response(error)
        payload = {"status": "deleted", "app_namespace": api_serialize_app_namespace(deleted)}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
