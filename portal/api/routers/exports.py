"""Bulk export router streaming one archive across environments."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, Query, Response, status
from fastapi.responses import StreamingResponse

from portal.domain import PermissionDeniedError, PortalError
from portal.namespaces import (
    ExportReport,
    NamespaceExporter,
    PermissionValidatorPort,
    exporter_build_archive_file_name,
    exporter_stream_archive,
)

from .common import PRINCIPAL_HEADER_NAME, api_error_response, api_missing_principal_response
from .namespaces import api_content_disposition

logger = logging.getLogger(__name__)


def api_create_exports_router(
    namespace_exporter: NamespaceExporter,
    permission_validator: PermissionValidatorPort,
) -> APIRouter:
    """Create router exposing the bulk configuration export endpoint.

    Args:
        namespace_exporter: Export service enumerating archive entries.
        permission_validator: Policy deciding who may export everything.

    Returns:
        APIRouter: Router exposing `/configs/export`.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if namespace_exporter is None:
        raise ValueError("namespace_exporter must not be None")
    if permission_validator is None:
        raise ValueError("permission_validator must not be None")

    router = APIRouter(prefix="/configs", tags=["exports"])

    @router.get("/export")
    def api_export_all(
        envs: str = Query(default=""),
        principal: str = Header(default="", alias=PRINCIPAL_HEADER_NAME),
    ) -> Response:
        """Stream every visible namespace of the requested environments as a zip archive.

        Inputs are validated before the first byte is sent; once streaming
        starts, failing namespaces are logged and left out of the archive.

        Args:
            envs: Comma-separated environment identifiers.
            principal: Requesting principal from the portal user header.

        Returns:
            Response: Streaming zip attachment or error envelope.

        Raises:
            RuntimeError: Raised when the response cannot be produced.
        """

        if not principal.strip():
            return api_missing_principal_response()
        try:
            if not permission_validator.permission_is_super_admin(principal):
                raise PermissionDeniedError("only super admins may export all configurations")
            plan = namespace_exporter.exporter_prepare_export(envs)
        except PortalError as error:
            return api_error_response(error)

        file_name = exporter_build_archive_file_name()
        logger.info(
            "bulk export download: principal=%s envs=%s file_name=%s",
            principal,
            ",".join(plan.envs),
            file_name,
        )
        entries = namespace_exporter.exporter_iter_entries(plan=plan, principal=principal, report=ExportReport())
        return StreamingResponse(
            exporter_stream_archive(entries),
            media_type="application/zip",
            headers={"Content-Disposition": api_content_disposition(file_name)},
            status_code=status.HTTP_200_OK,
        )

    return router
