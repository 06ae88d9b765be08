"""HTTP client for one environment's admin service."""

from __future__ import annotations

from typing import Any, Final
from urllib.parse import quote

import httpx

from portal.domain import AppNamespace, ConfigFileFormat, Namespace, NamespaceItem

from .catalog_errors import (
    EnvironmentCatalogConnectionError,
    EnvironmentCatalogNotFoundError,
    EnvironmentCatalogResponseError,
    EnvironmentCatalogTimeoutError,
)
from .interfaces import EnvironmentCatalogPort


class HttpEnvironmentCatalogClient(EnvironmentCatalogPort):
    """Environment catalog client speaking the admin service JSON API.

    One instance serves one environment. The underlying `httpx.Client` keeps a
    connection pool only; responses are never cached.
    """

    _USER_AGENT: Final[str] = "namespace-portal/1.0 (Python/httpx)"

    def __init__(
        self,
        env: str,
        base_url: str,
        request_timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize environment catalog client.

        Args:
            env: Normalized environment identifier.
            base_url: Admin service base URL for the environment.
            request_timeout_seconds: Timeout applied to each request.
            transport: Optional httpx transport, used by tests to inject mock responses.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_env = env.strip().lower()
        normalized_base_url = base_url.strip().rstrip("/")
        if not normalized_env:
            raise ValueError("env must not be blank")
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._env = normalized_env
        self._client = httpx.Client(
            base_url=normalized_base_url,
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT},
            transport=transport,
        )

    def adapter_environment_name(self) -> str:
        """Return the normalized environment identifier.

        Returns:
            str: Environment identifier.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return self._env

    def adapter_close(self) -> None:
        """Release pooled connections held by the underlying HTTP client."""

        self._client.close()

    def catalog_list_app_namespaces(self, app_id: str) -> list[AppNamespace]:
        """List app-namespace declarations the environment knows for one app.

        Args:
            app_id: Application identifier.

        Returns:
            list[AppNamespace]: Environment-side declarations.

        Raises:
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """

        payload = self._adapter_request("GET", f"/apps/{_quote(app_id)}/appnamespaces")
        return [self._adapter_map_app_namespace(app_id=app_id, row=row) for row in self._adapter_expect_list(payload)]

    def catalog_list_cluster_names(self, app_id: str) -> list[str]:
        """List cluster names provisioned for one app.

        Args:
            app_id: Application identifier.

        Returns:
            list[str]: Cluster names in upstream order.

        Raises:
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """

        payload = self._adapter_request("GET", f"/apps/{_quote(app_id)}/clusters")
        return [str(row["name"]) for row in self._adapter_expect_list(payload) if row.get("name")]

    def catalog_list_namespaces(self, app_id: str, cluster_name: str) -> list[Namespace]:
        """List namespace instances of one (app, cluster), without items.

        Args:
            app_id: Application identifier.
            cluster_name: Cluster name.

        Returns:
            list[Namespace]: Namespace instances with empty item tuples.

        Raises:
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """

        payload = self._adapter_request(
            "GET",
            f"/apps/{_quote(app_id)}/clusters/{_quote(cluster_name)}/namespaces",
        )
        namespaces: list[Namespace] = []
        for row in self._adapter_expect_list(payload):
            namespace_name = str(row.get("namespaceName") or "")
            if not namespace_name:
                continue
            namespaces.append(
                Namespace(
                    app_id=app_id,
                    env=self._env,
                    cluster_name=cluster_name,
                    namespace_name=namespace_name,
                    format=ConfigFileFormat.format_from_namespace_name(namespace_name),
                )
            )
        return namespaces

    def catalog_load_namespace(self, app_id: str, cluster_name: str, namespace_name: str) -> Namespace:
        """Load one namespace instance together with its items.

        Args:
            app_id: Application identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.

        Returns:
            Namespace: Namespace instance with items ordered by line number.

        Raises:
            EnvironmentCatalogNotFoundError: Raised when the instance does not exist.
            UpstreamUnavailableError: Raised when the environment cannot be read.
        """

        namespace_path = (
            f"/apps/{_quote(app_id)}/clusters/{_quote(cluster_name)}/namespaces/{_quote(namespace_name)}"
        )
        self._adapter_request("GET", namespace_path)
        items_payload = self._adapter_request("GET", f"{namespace_path}/items")
        items = tuple(self._adapter_map_item(row) for row in self._adapter_expect_list(items_payload))
        return Namespace(
            app_id=app_id,
            env=self._env,
            cluster_name=cluster_name,
            namespace_name=namespace_name,
            format=ConfigFileFormat.format_from_namespace_name(namespace_name),
            items=tuple(sorted(items, key=lambda item: item.line_num)),
        )

    def catalog_create_missing_app_namespace(self, app_namespace: AppNamespace) -> None:
        """Create a declaration and its missing cluster instances silently.

        Silent creation tolerates an existing declaration and only fills in
        absent cluster instances.

        Args:
            app_namespace: Declaration copied from the metadata store.

        Returns:
            None: Creation is a side effect in the environment.

        Raises:
            UpstreamUnavailableError: Raised when the environment write fails.
        """

        self._adapter_request(
            "POST",
            f"/apps/{_quote(app_namespace.app_id)}/appnamespaces",
            params={"silentCreation": "true"},
            json_body={
                "appId": app_namespace.app_id,
                "name": app_namespace.name,
                "format": app_namespace.format.value,
                "isPublic": app_namespace.is_public,
                "comment": app_namespace.comment,
            },
        )

    def catalog_create_namespace(
        self,
        app_id: str,
        cluster_name: str,
        namespace_name: str,
        operator: str,
    ) -> None:
        """Create one namespace instance in a cluster.

        Args:
            app_id: Application identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.
            operator: Principal recorded by the environment.

        Returns:
            None: Creation is a side effect in the environment.

        Raises:
            UpstreamUnavailableError: Raised when the environment write fails.
        """

        self._adapter_request(
            "POST",
            f"/apps/{_quote(app_id)}/clusters/{_quote(cluster_name)}/namespaces",
            json_body={
                "appId": app_id,
                "clusterName": cluster_name,
                "namespaceName": namespace_name,
                "dataChangeCreatedBy": operator,
            },
        )

    def catalog_list_public_namespace_instances(
        self,
        public_namespace_name: str,
        page: int,
        size: int,
    ) -> list[Namespace]:
        payload = self._adapter_request(
            "GET",
            f"/appnamespaces/{_quote(public_namespace_name)}/namespaces",
            params={"page": str(page), "size": str(size)},
        )
        namespaces: list[Namespace] = []
        for row in self._adapter_expect_list(payload):
            app_id = str(row.get("appId") or "")
            cluster_name = str(row.get("clusterName") or "")
            if not app_id or not cluster_name:
                continue
            namespaces.append(
                Namespace(
                    app_id=app_id,
                    env=self._env,
                    cluster_name=cluster_name,
                    namespace_name=public_namespace_name,
                    format=ConfigFileFormat.format_from_namespace_name(public_namespace_name),
                )
            )
        return namespaces

    def catalog_delete_namespace(
        self,
        app_id: str,
        cluster_name: str,
        namespace_name: str,
        operator: str,
    ) -> None:
        """Delete one namespace instance from a cluster.

        Args:
            app_id: Application identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.
            operator: Principal recorded by the environment.

        Returns:
            None: Deletion is a side effect in the environment.

        Raises:
            EnvironmentCatalogNotFoundError: Raised when the instance does not exist.
            UpstreamUnavailableError: Raised when the environment write fails.
        """

        self._adapter_request(
            "DELETE",
            f"/apps/{_quote(app_id)}/clusters/{_quote(cluster_name)}/namespaces/{_quote(namespace_name)}",
            params={"operator": operator},
        )

    def _adapter_request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """Execute one admin service call and decode its JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the environment base URL.
            params: Optional query parameters.
            json_body: Optional JSON request body.

        Returns:
            Any: Decoded JSON payload, or None for empty bodies.

        Raises:
            EnvironmentCatalogTimeoutError: Raised when the request times out.
            EnvironmentCatalogConnectionError: Raised for transport failures.
            EnvironmentCatalogNotFoundError: Raised for HTTP 404.
            EnvironmentCatalogResponseError: Raised for other error statuses or invalid JSON.
        """

        try:
            response = self._client.request(method, path, params=params, json=json_body)
        except httpx.TimeoutException as error:
            raise EnvironmentCatalogTimeoutError(
                f"environment {self._env} timed out on {method} {path}",
                env=self._env,
            ) from error
        except httpx.TransportError as error:
            raise EnvironmentCatalogConnectionError(
                f"environment {self._env} unreachable on {method} {path}",
                env=self._env,
            ) from error

        if response.status_code == 404:
            raise EnvironmentCatalogNotFoundError(
                f"environment {self._env} has no resource at {path}",
                env=self._env,
                status_code=404,
            )
        if response.status_code >= 400:
            raise EnvironmentCatalogResponseError(
                f"environment {self._env} returned HTTP {response.status_code} on {method} {path}",
                env=self._env,
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as error:
            raise EnvironmentCatalogResponseError(
                f"environment {self._env} returned invalid JSON on {method} {path}",
                env=self._env,
                status_code=response.status_code,
            ) from error

    def _adapter_expect_list(self, payload: Any) -> list[dict[str, Any]]:
        """Validate that a decoded payload is a list of JSON objects.

        Args:
            payload: Decoded JSON payload.

        Returns:
            list[dict[str, Any]]: Object rows; None is treated as empty.

        Raises:
            EnvironmentCatalogResponseError: Raised when the payload shape is unexpected.
        """

        if payload is None:
            return []
        if not isinstance(payload, list) or not all(isinstance(row, dict) for row in payload):
            raise EnvironmentCatalogResponseError(
                f"environment {self._env} returned an unexpected payload shape",
                env=self._env,
            )
        return payload

    def _adapter_map_app_namespace(self, app_id: str, row: dict[str, Any]) -> AppNamespace:
        name = str(row.get("name") or "")
        raw_format = str(row.get("format") or ConfigFileFormat.PROPERTIES.value)
        if ConfigFileFormat.format_is_valid(raw_format):
            file_format = ConfigFileFormat.format_from_text(raw_format)
        else:
            file_format = ConfigFileFormat.format_from_namespace_name(name)
        return AppNamespace(
            app_id=str(row.get("appId") or app_id),
            name=name,
            format=file_format,
            is_public=bool(row.get("isPublic", False)),
            comment=str(row.get("comment") or ""),
        )

    def _adapter_map_item(self, row: dict[str, Any]) -> NamespaceItem:
        """Map one admin service item row into a namespace item.

        Args:
            row: Decoded item object.

        Returns:
            NamespaceItem: Mapped item.

        Raises:
            EnvironmentCatalogResponseError: Raised when the line number is not an integer.
        """

        value = row.get("value")
        raw_line_num = row.get("lineNum") or 0
        try:
            line_num = int(raw_line_num)
        except (TypeError, ValueError) as error:
            raise EnvironmentCatalogResponseError(
                f"environment {self._env} returned item key={row.get('key')} with invalid lineNum={raw_line_num!r}",
                env=self._env,
            ) from error
        return NamespaceItem(
            key=str(row.get("key") or ""),
            value=None if value is None else str(value),
            comment=str(row.get("comment") or ""),
            line_num=line_num,
        )


def _quote(segment: str) -> str:
    return quote(segment, safe="")
