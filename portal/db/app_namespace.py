"""Database service for app-namespace declarations in the metadata store."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from portal.domain import AppNamespace, ConfigFileFormat

from .interfaces import AppNamespaceRepositoryPort, MetadataStoreUnavailableError

_SELECT_COLUMNS = "app_id, name, format, is_public, comment"


class SQLAlchemyAppNamespaceService(AppNamespaceRepositoryPort):
    """SQLAlchemy-backed metadata catalog.

    Declarations are soft-deleted, so every read filters on `is_deleted`. The
    service never caches rows; each call reads live state.
    """

    def __init__(self, engine: Engine):
        """Initialize metadata catalog service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_app_namespace_list_by_app(self, app_id: str) -> list[AppNamespace]:
        """List active declarations owned by one application.

        Args:
            app_id: Owning application identifier.

        Returns:
            list[AppNamespace]: Declarations ordered by name.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

        return self._db_fetch_many(
            sql=(
                f"SELECT {_SELECT_COLUMNS} FROM app_namespace "
                "WHERE app_id = :app_id AND is_deleted = :is_deleted "
                "ORDER BY name"
            ),
            parameters={"app_id": app_id, "is_deleted": False},
            failure_message=f"failed to list app namespaces for app_id={app_id}",
        )

    def db_app_namespace_list_public(self) -> list[AppNamespace]:
        """List all active public declarations.

        Returns:
            list[AppNamespace]: Public declarations ordered by name.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

        return self._db_fetch_many(
            sql=(
                f"SELECT {_SELECT_COLUMNS} FROM app_namespace "
                "WHERE is_public = :is_public AND is_deleted = :is_deleted "
                "ORDER BY name"
            ),
            parameters={"is_public": True, "is_deleted": False},
            failure_message="failed to list public app namespaces",
        )

    def db_app_namespace_get(self, app_id: str, name: str) -> AppNamespace | None:
        """Fetch one active declaration by owner and name.

        Args:
            app_id: Owning application identifier.
            name: Namespace name.

        Returns:
            AppNamespace | None: Matching declaration or None.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

        rows = self._db_fetch_many(
            sql=(
                f"SELECT {_SELECT_COLUMNS} FROM app_namespace "
                "WHERE app_id = :app_id AND name = :name AND is_deleted = :is_deleted"
            ),
            parameters={"app_id": app_id, "name": name, "is_deleted": False},
            failure_message=f"failed to read app namespace app_id={app_id}, name={name}",
        )
        return rows[0] if rows else None

    def db_app_namespace_get_public_by_name(self, name: str) -> AppNamespace | None:
        """Fetch one active public declaration by name, regardless of owner.

        Args:
            name: Namespace name.

        Returns:
            AppNamespace | None: Matching public declaration or None.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

        rows = self._db_fetch_many(
            sql=(
                f"SELECT {_SELECT_COLUMNS} FROM app_namespace "
                "WHERE name = :name AND is_public = :is_public AND is_deleted = :is_deleted"
            ),
            parameters={"name": name, "is_public": True, "is_deleted": False},
            failure_message=f"failed to read public app namespace name={name}",
        )
        return rows[0] if rows else None

    def db_app_namespace_create(self, app_namespace: AppNamespace, operator: str) -> AppNamespace:
        """Persist one new declaration.

        Args:
            app_namespace: Declaration to persist.
            operator: Principal recorded as creator.

        Returns:
            AppNamespace: Persisted declaration as read back from the store.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store write fails.
        """

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO app_namespace ("
                        "app_id, name, format, is_public, comment, is_deleted, created_by"
                        ") VALUES ("
                        ":app_id, :name, :format, :is_public, :comment, :is_deleted, :created_by"
                        ")"
                    ),
                    {
                        "app_id": app_namespace.app_id,
                        "name": app_namespace.name,
                        "format": app_namespace.format.value,
                        "is_public": app_namespace.is_public,
                        "comment": app_namespace.comment,
                        "is_deleted": False,
                        "created_by": operator,
                    },
                )
                created_row = connection.execute(
                    text(
                        f"SELECT {_SELECT_COLUMNS} FROM app_namespace "
                        "WHERE app_id = :app_id AND name = :name AND is_deleted = :is_deleted"
                    ),
                    {"app_id": app_namespace.app_id, "name": app_namespace.name, "is_deleted": False},
                ).mappings().one()
                return self._db_map_app_namespace_row(created_row)
        except SQLAlchemyError as error:
            raise MetadataStoreUnavailableError(
                f"failed to create app namespace app_id={app_namespace.app_id}, name={app_namespace.name}"
            ) from error

    def db_app_namespace_delete(self, app_id: str, name: str, operator: str) -> AppNamespace | None:
        """Soft-delete one active declaration.

        Args:
            app_id: Owning application identifier.
            name: Namespace name.
            operator: Principal recorded as deleter.

        Returns:
            AppNamespace | None: Deleted declaration or None when absent.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store write fails.
        """

        try:
            with self._engine.begin() as connection:
                existing_row = connection.execute(
                    text(
                        f"SELECT {_SELECT_COLUMNS} FROM app_namespace "
                        "WHERE app_id = :app_id AND name = :name AND is_deleted = :is_deleted"
                    ),
                    {"app_id": app_id, "name": name, "is_deleted": False},
                ).mappings().first()
                if existing_row is None:
                    return None

                connection.execute(
                    text(
                        "UPDATE app_namespace SET "
                        "is_deleted = :deleted, "
                        "deleted_by = :deleted_by, "
                        "deleted_at_utc = CURRENT_TIMESTAMP "
                        "WHERE app_id = :app_id AND name = :name AND is_deleted = :is_deleted"
                    ),
                    {
                        "deleted": True,
                        "deleted_by": operator,
                        "app_id": app_id,
                        "name": name,
                        "is_deleted": False,
                    },
                )
                return self._db_map_app_namespace_row(existing_row)
        except SQLAlchemyError as error:
            raise MetadataStoreUnavailableError(
                f"failed to delete app namespace app_id={app_id}, name={name}"
            ) from error

    def db_app_id_list(self) -> list[str]:
        """List application identifiers that own at least one active declaration.

        Returns:
            list[str]: Sorted application identifiers.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(
                        "SELECT DISTINCT app_id FROM app_namespace "
                        "WHERE is_deleted = :is_deleted ORDER BY app_id"
                    ),
                    {"is_deleted": False},
                ).all()
        except SQLAlchemyError as error:
            raise MetadataStoreUnavailableError("failed to list application ids") from error
        return [str(row[0]) for row in rows]

    def _db_fetch_many(
        self,
        sql: str,
        parameters: dict[str, Any],
        failure_message: str,
    ) -> list[AppNamespace]:
        """Execute one declaration query and map every row.

        Args:
            sql: Parameterized SELECT statement over `_SELECT_COLUMNS`.
            parameters: Bound parameters.
            failure_message: Message used when the read fails.

        Returns:
            list[AppNamespace]: Mapped declarations.

        Raises:
            MetadataStoreUnavailableError: Raised when the metadata store read fails.
        """

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(text(sql), parameters).mappings().all()
        except SQLAlchemyError as error:
            raise MetadataStoreUnavailableError(failure_message) from error
        return [self._db_map_app_namespace_row(row) for row in rows]

    def _db_map_app_namespace_row(self, row: Any) -> AppNamespace:
        """Map one result mapping to a typed declaration.

        Args:
            row: SQLAlchemy row mapping.

        Returns:
            AppNamespace: Typed declaration.

        Raises:
            ValueError: Raised when the stored format is unsupported.
        """

        return AppNamespace(
            app_id=str(row["app_id"]),
            name=str(row["name"]),
            format=ConfigFileFormat.format_from_text(str(row["format"])),
            is_public=bool(row["is_public"]),
            comment=str(row["comment"] or ""),
        )
