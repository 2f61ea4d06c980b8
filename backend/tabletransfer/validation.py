"""Existence checks run before any schema is read."""

from __future__ import annotations

import logging

from tabletransfer.connectors.base_connector import BaseConnector
from tabletransfer.exceptions import NotFoundError
from tabletransfer.models import Side, TableIdentifier

logger = logging.getLogger(__name__)


def ensure_database_exists(
    connector: BaseConnector,
    conn,
    database: str,
    side: Side,
) -> None:
    """Verify the server behind ``conn`` has a database called ``database``.

    Raises:
        NotFoundError: If the database is not in the server catalog.
    """
    if not connector.database_exists(conn, database):
        raise NotFoundError(
            f"{side.label} database '{database}' does not exist. "
            f"Please re-enter the {side.value} database.",
            side=side.value,
            object_name=database,
        )
    logger.debug(f"{side.label} database {database} exists")


def ensure_table_exists(
    connector: BaseConnector,
    conn,
    table: TableIdentifier,
    database: str,
    side: Side,
) -> None:
    """Verify ``table`` exists in the active database of ``conn``.

    Raises:
        NotFoundError: If the table is missing.
    """
    if not connector.table_exists(conn, table.schema, table.name):
        raise NotFoundError(
            f"{side.label} table '{table}' does not exist in database '{database}'. "
            f"Please correct the {side.value} table name.",
            side=side.value,
            object_name=str(table),
        )
