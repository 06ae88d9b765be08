"""Metadata store health check: connectivity plus presence of the declaration catalog."""

from sqlalchemy import Engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError

from portal.domain import HealthStatus

from .interfaces import DatabaseHealthPort

APP_NAMESPACE_TABLE_NAME = "app_namespace"


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Reports whether the metadata store is reachable and migrated."""

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the metadata store URL with the password masked.

        Returns:
            str: Rendered engine URL string.

        Raises:
            RuntimeError: Raised if URL rendering fails.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Check that the `app_namespace` catalog exists and count its active declarations.

        A reachable store without the catalog table reports `schema_missing`
        instead of raising, so operators can tell an unmigrated database from
        an outage.

        Returns:
            HealthStatus: `ok` with the active declaration count, or `schema_missing`.

        Raises:
            ConnectionError: Raised when the metadata store cannot be queried.
        """

        try:
            with self._engine.connect() as connection:
                if not inspect(connection).has_table(APP_NAMESPACE_TABLE_NAME):
                    return HealthStatus(
                        status="schema_missing",
                        detail=f"table {APP_NAMESPACE_TABLE_NAME} not found; run alembic upgrade head",
                    )
                active_declarations = connection.execute(
                    text(f"SELECT COUNT(*) FROM {APP_NAMESPACE_TABLE_NAME} WHERE is_deleted = :is_deleted"),
                    {"is_deleted": False},
                ).scalar_one()
        except SQLAlchemyError as error:
            raise ConnectionError("metadata store connectivity check failed") from error
        return HealthStatus(
            status="ok",
            detail=f"metadata store reachable; active app namespaces={active_declarations}",
        )
