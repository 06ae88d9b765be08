"""Tests for the bulk configuration export endpoint."""

from __future__ import annotations

import io
import logging
import zipfile

import pytest
from fastapi.testclient import TestClient

from catalog_stubs import InMemoryAppNamespaceRepository, InMemoryEnvironmentCatalog, build_portal_application
from portal.domain import AppNamespace, NamespaceItem


def _build_client() -> TestClient:
    repository = InMemoryAppNamespaceRepository([AppNamespace(app_id="orderservice", name="application")])
    dev_catalog = InMemoryEnvironmentCatalog("dev")
    fat_catalog = InMemoryEnvironmentCatalog("fat")
    dev_catalog.catalog_add_namespace("orderservice", "default", "application", [NamespaceItem(key="k", value="dev")])
    fat_catalog.catalog_add_namespace("orderservice", "default", "application", [NamespaceItem(key="k", value="fat")])
    fat_catalog.catalog_add_namespace(
        "orderservice",
        "default",
        "broken.json",
        [NamespaceItem(key="k", value=None, line_num=1)],
    )
    return TestClient(build_portal_application(repository, dev_catalog, fat_catalog))


def test_api_export_streams_zip_archive_for_super_admin(caplog: pytest.LogCaptureFixture) -> None:
    """Stream a zip of every requested environment and leave failing namespaces out.

    Args:
        caplog: Pytest log capture fixture.

    Returns:
        None: Assertions validate archive contents and headers.

    Raises:
        AssertionError: Raised when the archive or headers are wrong.
    """

    client = _build_client()

    with caplog.at_level(logging.INFO):
        response = client.get("/configs/export", params={"envs": "dev,FAT"}, headers={"X-Portal-User": "admin"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert response.headers["content-disposition"].startswith("attachment; filename*=UTF-8''config_export_")
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == [
            "dev/orderservice/default/application.properties",
            "fat/orderservice/default/application.properties",
        ]
        assert archive.read("fat/orderservice/default/application.properties") == b"k=fat\n"
    assert "bulk export download: principal=admin envs=dev,fat" in caplog.text
    assert "namespace=broken.json" in caplog.text


def test_api_export_rejects_before_streaming() -> None:
    """Refuse anonymous, non-admin and malformed requests with a JSON error envelope.

    Returns:
        None: Assertions validate pre-stream rejection.

    Raises:
        AssertionError: Raised when a bad request starts streaming.
    """

    client = _build_client()

    anonymous_response = client.get("/configs/export", params={"envs": "dev"})
    viewer_response = client.get("/configs/export", params={"envs": "dev"}, headers={"X-Portal-User": "viewer"})
    empty_response = client.get("/configs/export", params={"envs": " , "}, headers={"X-Portal-User": "admin"})
    unknown_response = client.get("/configs/export", params={"envs": "dev,uat"}, headers={"X-Portal-User": "admin"})

    assert anonymous_response.status_code == 401
    assert viewer_response.status_code == 403
    assert viewer_response.json()["code"] == "PERMISSION_DENIED"
    assert empty_response.status_code == 400
    assert unknown_response.status_code == 400
    assert unknown_response.json()["code"] == "UNKNOWN_ENVIRONMENT"
