"""App namespace declaration lifecycle in the metadata store."""

from __future__ import annotations

from typing import Final

from portal.db import AppNamespaceRepositoryPort
from portal.domain import (
    AppNamespace,
    AppNamespaceConflictError,
    ConfigFileFormat,
    NamespaceNotFoundError,
    NamespaceValidationError,
)

from .events import AppNamespaceEvent, AppNamespaceEventPublisher, AppNamespaceEventType
from .validation import validation_require_app_namespace_name, validation_require_name, validation_require_text

DEFAULT_NAMESPACE_NAME: Final[str] = "application"


class AppNamespaceService:
    """Creates, finds and deletes app namespace declarations."""

    def __init__(
        self,
        app_namespace_repository: AppNamespaceRepositoryPort,
        event_publisher: AppNamespaceEventPublisher,
    ):
        """Initialize declaration service dependencies.

        Args:
            app_namespace_repository: Metadata store catalog.
            event_publisher: Publisher notified after each change.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if app_namespace_repository is None:
            raise ValueError("app_namespace_repository must not be None")
        if event_publisher is None:
            raise ValueError("event_publisher must not be None")
        self._app_namespace_repository = app_namespace_repository
        self._event_publisher = event_publisher

    def declarations_list_public(self) -> list[AppNamespace]:
        return sorted(
            self._app_namespace_repository.db_app_namespace_list_public(),
            key=lambda app_namespace: (app_namespace.name, app_namespace.app_id),
        )

    def declarations_list_by_app(self, app_id: str) -> list[AppNamespace]:
        normalized_app_id = validation_require_text(app_id, "app_id")
        return sorted(
            self._app_namespace_repository.db_app_namespace_list_by_app(normalized_app_id),
            key=lambda app_namespace: app_namespace.name,
        )

    def declarations_find(self, app_id: str, namespace_name: str) -> AppNamespace:
        """Find one declaration of an application.

        Args:
            app_id: Application identifier.
            namespace_name: Full namespace name, including any format suffix.

        Returns:
            AppNamespace: Stored declaration.

        Raises:
            NamespaceValidationError: Raised for blank or malformed inputs.
            NamespaceNotFoundError: Raised when the declaration does not exist.
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        normalized_name = validation_require_name(namespace_name, "namespace_name")
        app_namespace = self._app_namespace_repository.db_app_namespace_get(
            app_id=normalized_app_id,
            name=normalized_name,
        )
        if app_namespace is None:
            raise NamespaceNotFoundError(
                f"app namespace not found: app_id={normalized_app_id}, name={normalized_name}"
            )
        return app_namespace

    def declarations_create(
        self,
        app_id: str,
        name: str,
        file_format: str,
        is_public: bool,
        comment: str,
        operator: str,
    ) -> AppNamespace:
        """Create a declaration and publish a creation event.

        The stored name is the base name plus `.{format}` for every format
        other than `properties`. Names are unique per application, and a
        public name is unique across all applications.

        Args:
            app_id: Owning application identifier.
            name: Base namespace name without format suffix.
            file_format: Declared format token.
            is_public: Whether the namespace is shared across applications.
            comment: Free-text description.
            operator: Principal creating the declaration.

        Returns:
            AppNamespace: Persisted declaration.

        Raises:
            NamespaceValidationError: Raised for blank, malformed or unsupported inputs.
            AppNamespaceConflictError: Raised when the name is already taken.
            MetadataStoreUnavailableError: Raised when the metadata store fails.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        base_name = validation_require_app_namespace_name(name)
        normalized_operator = validation_require_text(operator, "operator")
        if not ConfigFileFormat.format_is_valid(file_format or ""):
            raise NamespaceValidationError(
                f"unsupported format={file_format}",
                error_code="INVALID_FORMAT",
            )
        declared_format = ConfigFileFormat.format_from_text(file_format)
        full_name = (
            base_name
            if declared_format is ConfigFileFormat.PROPERTIES
            else f"{base_name}.{declared_format.value}"
        )

        if self._app_namespace_repository.db_app_namespace_get(app_id=normalized_app_id, name=full_name) is not None:
            raise AppNamespaceConflictError(
                f"app namespace already exists: app_id={normalized_app_id}, name={full_name}"
            )
        public_app_namespace = self._app_namespace_repository.db_app_namespace_get_public_by_name(full_name)
        if public_app_namespace is not None:
            raise AppNamespaceConflictError(
                f"public app namespace {full_name} already exists in app_id={public_app_namespace.app_id}"
            )

        created = self._app_namespace_repository.db_app_namespace_create(
            AppNamespace(
                app_id=normalized_app_id,
                name=full_name,
                format=declared_format,
                is_public=is_public,
                comment=(comment or "").strip(),
            ),
            operator=normalized_operator,
        )
        self._event_publisher.events_publish(
            AppNamespaceEvent(
                event_type=AppNamespaceEventType.CREATED,
                app_namespace=created,
                operator=normalized_operator,
            )
        )
        return created

    def declarations_delete(self, app_id: str, namespace_name: str, operator: str) -> AppNamespace:
        """Soft-delete a declaration and publish a deletion event.

        Args:
            app_id: Owning application identifier.
            namespace_name: Full namespace name.
            operator: Principal deleting the declaration.

        Returns:
            AppNamespace: Declaration as it was before deletion.

        Raises:
            NamespaceValidationError: Raised for invalid inputs or the default namespace.
            NamespaceNotFoundError: Raised when the declaration does not exist.
            MetadataStoreUnavailableError: Raised when the metadata store fails.
        """

        normalized_app_id = validation_require_text(app_id, "app_id")
        normalized_name = validation_require_name(namespace_name, "namespace_name")
        normalized_operator = validation_require_text(operator, "operator")
        if normalized_name == DEFAULT_NAMESPACE_NAME:
            raise NamespaceValidationError(
                f"default namespace {DEFAULT_NAMESPACE_NAME} cannot be deleted",
                error_code="DEFAULT_NAMESPACE",
            )

        deleted = self._app_namespace_repository.db_app_namespace_delete(
            app_id=normalized_app_id,
            name=normalized_name,
            operator=normalized_operator,
        )
        if deleted is None:
            raise NamespaceNotFoundError(
                f"app namespace not found: app_id={normalized_app_id}, name={normalized_name}"
            )
        self._event_publisher.events_publish(
            AppNamespaceEvent(
                event_type=AppNamespaceEventType.DELETED,
                app_namespace=deleted,
                operator=normalized_operator,
            )
        )
        return deleted
