"""Resolution of environment identifiers to their catalog clients."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from portal.domain import NamespaceValidationError

from .environment_catalog import HttpEnvironmentCatalogClient
from .interfaces import EnvironmentCatalogPort


class EnvironmentCatalogRegistry:
    """Configured set of environments, one catalog client per environment."""

    def __init__(self, clients: Mapping[str, EnvironmentCatalogPort]):
        """Initialize the registry.

        Args:
            clients: Catalog clients keyed by environment identifier.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when no environment is configured.
        """

        if not clients:
            raise ValueError("at least one environment must be configured")
        self._clients = {env.strip().lower(): client for env, client in clients.items()}

    def registry_environment_names(self) -> tuple[str, ...]:
        """Return configured environment identifiers in configuration order.

        Returns:
            tuple[str, ...]: Normalized environment identifiers.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return tuple(self._clients)

    def registry_normalize_env(self, env: str) -> str:
        """Normalize and validate one environment identifier.

        Args:
            env: Raw environment identifier, compared case-insensitively.

        Returns:
            str: Normalized configured identifier.

        Raises:
            NamespaceValidationError: Raised when the identifier is blank or not configured.
        """

        normalized_env = (env or "").strip().lower()
        if not normalized_env:
            raise NamespaceValidationError("env must not be blank")
        if normalized_env not in self._clients:
            raise NamespaceValidationError(
                f"unknown environment={normalized_env}",
                error_code="UNKNOWN_ENVIRONMENT",
            )
        return normalized_env

    def registry_get_client(self, env: str) -> EnvironmentCatalogPort:
        """Return the catalog client serving one environment.

        Args:
            env: Raw environment identifier.

        Returns:
            EnvironmentCatalogPort: Client bound to the environment.

        Raises:
            NamespaceValidationError: Raised when the identifier is blank or not configured.
        """

        return self._clients[self.registry_normalize_env(env)]

    def registry_close(self) -> None:
        """Close every client that holds network resources."""

        for client in self._clients.values():
            close = getattr(client, "adapter_close", None)
            if close is not None:
                close()


def adapter_create_environment_registry(
    environment_endpoints: Mapping[str, str],
    request_timeout_seconds: float,
    transport: httpx.BaseTransport | None = None,
) -> EnvironmentCatalogRegistry:
    """Build one HTTP catalog client per configured environment.

    Args:
        environment_endpoints: Admin service base URL per environment.
        request_timeout_seconds: Timeout applied to each request.
        transport: Optional shared httpx transport.

    Returns:
        EnvironmentCatalogRegistry: Registry over the created clients.

    Raises:
        ValueError: Raised when endpoints are empty or invalid.
    """

    return EnvironmentCatalogRegistry(
        clients={
            env: HttpEnvironmentCatalogClient(
                env=env,
                base_url=base_url,
                request_timeout_seconds=request_timeout_seconds,
                transport=transport,
            )
            for env, base_url in environment_endpoints.items()
        }
    )
