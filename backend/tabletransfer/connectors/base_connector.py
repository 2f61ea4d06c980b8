"""Base connector class for database connectors."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Type

from tabletransfer.models import IsolationLevel

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    """Abstract base class for the database dialects a transfer can talk to.

    A connector holds no per-transfer state. Every operation receives the
    connection object it returned from ``connect`` so that one connector
    instance can serve both ends of a transfer.
    """

    #: Exception types raised by the driver. The transfer reports these as
    #: database errors and everything else as unexpected.
    backend_errors: Tuple[Type[BaseException], ...] = ()

    #: Schema assumed when a table identifier names none.
    default_schema: str = "dbo"

    def __init__(self, connection_config: Optional[Dict[str, Any]] = None):
        """Initialize connector with connection configuration.

        Args:
            connection_config: Driver options shared by every connection this
                connector opens (timeouts, driver name, ...). Connection
                targets themselves are passed to ``connect``.
        """
        self.config = dict(connection_config or {})
        self._validate_config()

    @abstractmethod
    def _validate_config(self) -> None:
        """Validate the connector configuration.

        Raises:
            ValueError: If the configuration is unusable.
        """
        pass

    @abstractmethod
    def connect(self, target: str):
        """Open a connection to the server described by ``target``.

        Returns:
            Database connection object (type depends on database driver).
            It must provide ``close()``.
        """
        pass

    @abstractmethod
    def database_exists(self, conn, database: str) -> bool:
        """Tell whether the server's catalog lists ``database``."""
        pass

    @abstractmethod
    def use_database(self, conn, database: str) -> None:
        """Make ``database`` the active database of ``conn``."""
        pass

    @abstractmethod
    def table_exists(self, conn, schema: str, table: str) -> bool:
        """Tell whether the active database contains ``schema.table``."""
        pass

    @abstractmethod
    def fetch_column_metadata(self, conn, schema: str, table: str) -> List[Sequence[Any]]:
        """Read column metadata rows for a table.

        Returns:
            Rows of (name, data type, character maximum length, numeric
            precision, numeric scale, 'YES'/'NO' nullability) ordered by
            ordinal position. Empty when the table has no readable columns.
        """
        pass

    @abstractmethod
    def identity_columns(self, conn, schema: str, table: str) -> Set[str]:
        """Names of the columns whose values the server generates on insert."""
        pass

    @abstractmethod
    def get_table_row_count(self, conn, schema: str, table: str) -> int:
        pass

    @abstractmethod
    def execute_ddl(self, conn, statement: str) -> None:
        """Run a DDL statement outside of any explicit transaction."""
        pass

    @abstractmethod
    def begin_transaction(self, conn, isolation_level: IsolationLevel) -> None:
        pass

    @abstractmethod
    def commit(self, conn) -> None:
        pass

    @abstractmethod
    def rollback(self, conn) -> None:
        pass

    @abstractmethod
    def open_reader(self, conn, schema: str, table: str):
        """Execute ``SELECT *`` on a table and return the open cursor.

        The cursor follows DB-API: ``description`` names the columns,
        ``fetchmany(size)`` streams rows forward only and ``close()``
        releases it.
        """
        pass

    @abstractmethod
    def insert_rows(
        self,
        conn,
        schema: str,
        table: str,
        column_names: List[str],
        rows: List[Sequence[Any]],
    ) -> int:
        """Insert ``rows`` into the named columns of ``schema.table``.

        Runs inside whatever transaction is open on ``conn``; server-side
        constraints and triggers apply as for any insert.

        Returns:
            Number of rows sent to the server.
        """
        pass

    def test_connection(self, target: str) -> bool:
        """Test that a connection to ``target`` can be opened.

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            conn = self.connect(target)
        except self.backend_errors as e:
            logger.error(f"Connection test failed: {e}")
            return False
        conn.close()
        return True
