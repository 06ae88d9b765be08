"""Typed domain models shared across runtime layers.

This module provides the data contracts exchanged between the metadata store,
the per-environment catalogs, and the reconciliation and export services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ConfigFileFormat(str, Enum):
    """Supported configuration file formats for namespaces."""

    PROPERTIES = "properties"
    XML = "xml"
    JSON = "json"
    YML = "yml"
    YAML = "yaml"
    TXT = "txt"

    @classmethod
    def format_is_valid(cls, value: str) -> bool:
        """Return whether a text token names a supported format.

        Args:
            value: Candidate format token, compared case-insensitively.

        Returns:
            bool: True when the token is a supported format value.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        normalized_value = value.strip().lower()
        return any(member.value == normalized_value for member in cls)

    @classmethod
    def format_from_text(cls, value: str) -> ConfigFileFormat:
        """Resolve a format member from a text token.

        Args:
            value: Format token, compared case-insensitively.

        Returns:
            ConfigFileFormat: Matching format member.

        Raises:
            ValueError: Raised when the token is not a supported format.
        """

        return cls(value.strip().lower())

    @classmethod
    def format_from_namespace_name(cls, namespace_name: str) -> ConfigFileFormat:
        """Resolve the format implied by a namespace name suffix.

        Args:
            namespace_name: Namespace name such as `application` or `db.yml`.

        Returns:
            ConfigFileFormat: Suffix format when recognized, otherwise `properties`.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        name_segments = namespace_name.split(".")
        if len(name_segments) > 1 and cls.format_is_valid(name_segments[-1]):
            return cls.format_from_text(name_segments[-1])
        return cls.PROPERTIES


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class AppNamespace:
    """Application-level namespace declaration.

    Attributes:
        app_id: Owning application identifier.
        name: Namespace name, including a format suffix for non-properties formats.
        format: Declared configuration format.
        is_public: Whether the namespace is shared across applications.
        comment: Optional free-text description.
    """

    app_id: str
    name: str
    format: ConfigFileFormat = ConfigFileFormat.PROPERTIES
    is_public: bool = False
    comment: str = ""


@dataclass(frozen=True)
class NamespaceItem:
    """One configuration item inside a namespace instance.

    Attributes:
        key: Item key; blank for comment-only rows.
        value: Item value.
        comment: Optional comment attached to the item.
        line_num: Stored position used to order items.
    """

    key: str
    value: str | None
    comment: str = ""
    line_num: int = 0


@dataclass(frozen=True)
class Namespace:
    """Provisioned namespace instance inside one environment and cluster.

    Attributes:
        app_id: Application identifier.
        env: Normalized environment identifier.
        cluster_name: Cluster name.
        namespace_name: Namespace name.
        format: Configuration format of the namespace.
        items: Configuration items in stored order.
    """

    app_id: str
    env: str
    cluster_name: str
    namespace_name: str
    format: ConfigFileFormat = ConfigFileFormat.PROPERTIES
    items: tuple[NamespaceItem, ...] = field(default_factory=tuple)

    def namespace_sorted_items(self) -> tuple[NamespaceItem, ...]:
        """Return items ordered by stored line number.

        Returns:
            tuple[NamespaceItem, ...]: Items sorted by `line_num`, stable for ties.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return tuple(sorted(self.items, key=lambda item: item.line_num))


@dataclass(frozen=True)
class NamespaceUsage:
    """Read-only view of whether a namespace is provisioned for one cluster.

    Attributes:
        app_id: Application identifier.
        namespace_name: Namespace name.
        env: Normalized environment identifier.
        cluster_name: Cluster name.
        provisioned: Whether a runtime instance exists in the cluster.
    """

    app_id: str
    namespace_name: str
    env: str
    cluster_name: str
    provisioned: bool
