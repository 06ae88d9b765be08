"""Visibility policy seam for namespace reads.

Authorization itself happens outside the portal; this module only decides
whether configuration should be hidden from an already-authorized principal.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from portal.db import AppNamespaceRepositoryPort


class PermissionValidatorPort(Protocol):
    """Port definition for per-namespace visibility decisions."""

    def permission_is_super_admin(self, principal: str) -> bool:
        """Return whether the principal holds the read-all capability.

        Args:
            principal: Opaque principal identifier.

        Returns:
            bool: True for super administrators.

        Raises:
            RuntimeError: Raised when the capability cannot be evaluated.
        """

    def permission_can_read_namespace(
        self,
        principal: str,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
    ) -> bool:
        """Return whether the principal may read one namespace.

        Args:
            principal: Opaque principal identifier.
            app_id: Application identifier.
            env: Normalized environment identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.

        Returns:
            bool: True when reading is permitted.

        Raises:
            UpstreamUnavailableError: Raised when the decision needs an unavailable store.
        """

    def permission_should_hide_config(
        self,
        principal: str,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
    ) -> bool:
        """Return whether namespace items must be hidden from the principal.

        Args:
            principal: Opaque principal identifier.
            app_id: Application identifier.
            env: Normalized environment identifier.
            cluster_name: Cluster name.
            namespace_name: Namespace name.

        Returns:
            bool: True when items must be withheld.

        Raises:
            UpstreamUnavailableError: Raised when the decision needs an unavailable store.
        """


class SettingsPermissionValidator(PermissionValidatorPort):
    """Visibility policy driven by configured super admins and member-only environments.

    In a member-only environment, items of private namespaces are hidden from
    everyone except super admins. Public namespaces are never hidden.
    """

    def __init__(
        self,
        app_namespace_repository: AppNamespaceRepositoryPort,
        super_admin_users: Iterable[str],
        member_only_envs: Iterable[str],
    ):
        if app_namespace_repository is None:
            raise ValueError("app_namespace_repository must not be None")
        self._app_namespace_repository = app_namespace_repository
        self._super_admin_users = frozenset(user.strip() for user in super_admin_users if user.strip())
        self._member_only_envs = frozenset(env.strip().lower() for env in member_only_envs if env.strip())

    def permission_is_super_admin(self, principal: str) -> bool:
        return principal.strip() in self._super_admin_users

    def permission_can_read_namespace(
        self,
        principal: str,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
    ) -> bool:
        """Grant read access to every namespace.

        Read capability is granted upstream before the portal is invoked, so
        none of the arguments narrow the answer here.

        Returns:
            bool: Always True.

        Raises:
            RuntimeError: This policy does not raise runtime errors.
        """

        return True

    def permission_should_hide_config(
        self,
        principal: str,
        app_id: str,
        env: str,
        cluster_name: str,
        namespace_name: str,
    ) -> bool:
        """Hide private namespace items in member-only environments.

        Args:
            principal: Opaque principal identifier.
            app_id: Application identifier.
            env: Normalized environment identifier.
            cluster_name: Cluster name; visibility does not vary by cluster.
            namespace_name: Namespace name.

        Returns:
            bool: True when items must be withheld.

        Raises:
            MetadataStoreUnavailableError: Raised when the declaration lookup fails.
        """

        if env.strip().lower() not in self._member_only_envs:
            return False
        if self.permission_is_super_admin(principal):
            return False

        app_namespace = self._app_namespace_repository.db_app_namespace_get(app_id=app_id, name=namespace_name)
        if app_namespace is None:
            # Linked namespaces are declared publicly by another application.
            app_namespace = self._app_namespace_repository.db_app_namespace_get_public_by_name(namespace_name)
        if app_namespace is not None and app_namespace.is_public:
            return False
        return True
