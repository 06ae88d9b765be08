"""Database engine utilities for the metadata store.

All SQLAlchemy engine construction for the portal goes through this module.
"""

from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url


def db_create_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for metadata store access.

    The reconciler reads declarations from a worker thread, so SQLite
    connections are opened without the same-thread check.

    Args:
        database_url: SQLAlchemy database URL.

    Returns:
        Engine: Engine with connection pre-ping enabled.

    Raises:
        ValueError: Raised when the database URL is blank.
    """

    normalized_url = database_url.strip()
    if not normalized_url:
        raise ValueError("database_url must not be blank")

    connect_args: dict[str, Any] = {}
    if make_url(normalized_url).get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    return create_engine(normalized_url, pool_pre_ping=True, connect_args=connect_args)
