"""SQL Server connector backed by pyodbc."""

from __future__ import annotations

import logging
import re
from contextlib import closing
from typing import Any, Dict, List, Optional, Sequence, Set

try:
    import pyodbc

    SQLSERVER_AVAILABLE = True
except ImportError:
    SQLSERVER_AVAILABLE = False
    pyodbc = None  # type: ignore

from tabletransfer.identifiers import quote_identifier, quote_table
from tabletransfer.models import IsolationLevel, TableIdentifier

from .base_connector import BaseConnector

logger = logging.getLogger(__name__)

# Checked in order of preference.
DRIVER_CANDIDATES = [
    "ODBC Driver 18 for SQL Server",
    "ODBC Driver 17 for SQL Server",
    "ODBC Driver 13 for SQL Server",
    "ODBC Driver 11 for SQL Server",
    "SQL Server Native Client 11.0",
    "SQL Server Native Client 10.0",
    "SQL Server",
    "FreeTDS",
]

_PASSWORD_RE = re.compile(r"((?:PWD|Password)\s*=\s*)(?:\{(?:[^}]|\}\})*\}|[^;]*)", re.IGNORECASE)


def mask_password(conn_str: str) -> str:
    """Hide the password of an ODBC connection string for logging."""
    return _PASSWORD_RE.sub(r"\1***", conn_str)


class SQLServerConnector(BaseConnector):
    """Connector for transferring tables between SQL Server databases."""

    def __init__(self, connection_config: Optional[Dict[str, Any]] = None):
        """Initialize SQL Server connector.

        Args:
            connection_config: Dictionary containing:
                - driver: ODBC driver name (optional, detected when missing)
                - connect_timeout: Login timeout in seconds (optional, default: 30)
                - command_timeout: Timeout for catalog queries and DDL in
                  seconds (optional, default: 30, 0 disables)
                - fast_executemany: Use pyodbc's array binding for inserts
                  (optional, default: True)
        """
        if not SQLSERVER_AVAILABLE:
            raise ImportError(
                "pyodbc is not installed. "
                "Install it with: pip install pyodbc"
            )
        super().__init__(connection_config)
        self.backend_errors = (pyodbc.Error,)

    def _validate_config(self) -> None:
        """Validate that timeouts are usable numbers."""
        for key in ("connect_timeout", "command_timeout"):
            value = self.config.get(key, 30)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{key} must be a non-negative integer, got {value!r}")

    @property
    def command_timeout(self) -> int:
        return self.config.get("command_timeout", 30)

    def _detect_odbc_driver(self) -> Optional[str]:
        """Detect an installed ODBC driver for SQL Server.

        Returns:
            Driver name if found, None otherwise
        """
        available_drivers = pyodbc.drivers()
        logger.debug(f"Available ODBC drivers: {available_drivers}")

        for driver_name in DRIVER_CANDIDATES:
            if driver_name in available_drivers:
                logger.info(f"Detected ODBC driver: {driver_name}")
                return driver_name

        for driver_name in available_drivers:
            if "sql server" in driver_name.lower():
                logger.info(f"Detected ODBC driver (fallback): {driver_name}")
                return driver_name

        logger.warning(f"No SQL Server ODBC driver found. Available drivers: {available_drivers}")
        return None

    def _build_connection_string(self, target: str) -> str:
        """Turn a connection target into a pyodbc connection string.

        Targets that already name a DRIVER are used unchanged; otherwise the
        configured or detected driver is prepended.
        """
        conn_str = target.strip()
        if re.search(r"(^|;)\s*DRIVER\s*=", conn_str, re.IGNORECASE):
            return conn_str

        driver = self.config.get("driver") or self._detect_odbc_driver()
        if not driver:
            raise ValueError(
                "No ODBC driver found for SQL Server. "
                "Please install Microsoft ODBC Driver for SQL Server "
                "or add DRIVER={...} to the connection string."
            )
        return f"DRIVER={{{driver}}};{conn_str}"

    def connect(self, target: str):
        """Open an autocommitting connection to SQL Server.

        Returns:
            SQL Server connection object (pyodbc.Connection)
        """
        conn_str = self._build_connection_string(target)
        logger.debug(f"Connection string: {mask_password(conn_str)}")
        try:
            conn = pyodbc.connect(
                conn_str,
                autocommit=True,
                timeout=self.config.get("connect_timeout", 30),
            )
        except pyodbc.Error as e:
            logger.error(f"Failed to connect to SQL Server: {e}")
            raise
        conn.timeout = self.command_timeout
        logger.info("Connected to SQL Server")
        return conn

    def _fetch_one(self, conn, query: str, *params):
        with closing(conn.cursor()) as cursor:
            cursor.execute(query, *params)
            return cursor.fetchone()

    def database_exists(self, conn, database: str) -> bool:
        row = self._fetch_one(conn, "SELECT 1 FROM sys.databases WHERE name = ?", database)
        return row is not None

    def use_database(self, conn, database: str) -> None:
        with closing(conn.cursor()) as cursor:
            cursor.execute(f"USE {quote_identifier(database)}")
        logger.debug(f"Switched to database {database}")

    def table_exists(self, conn, schema: str, table: str) -> bool:
        row = self._fetch_one(
            conn,
            "SELECT 1 FROM INFORMATION_SCHEMA.TABLES WHERE TABLE_SCHEMA = ? AND TABLE_NAME = ?",
            schema,
            table,
        )
        return row is not None

    def fetch_column_metadata(self, conn, schema: str, table: str) -> List[Sequence[Any]]:
        query = """
            SELECT
                COLUMN_NAME,
                DATA_TYPE,
                CHARACTER_MAXIMUM_LENGTH,
                NUMERIC_PRECISION,
                NUMERIC_SCALE,
                IS_NULLABLE
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_SCHEMA = ? AND TABLE_NAME = ?
            ORDER BY ORDINAL_POSITION
        """
        with closing(conn.cursor()) as cursor:
            cursor.execute(query, schema, table)
            return [tuple(row) for row in cursor.fetchall()]

    def identity_columns(self, conn, schema: str, table: str) -> Set[str]:
        query = """
            SELECT c.name
            FROM sys.identity_columns AS c
            WHERE c.object_id = OBJECT_ID(?)
        """
        with closing(conn.cursor()) as cursor:
            cursor.execute(query, quote_table(TableIdentifier(schema, table)))
            return {row[0] for row in cursor.fetchall()}

    def get_table_row_count(self, conn, schema: str, table: str) -> int:
        qualified = quote_table(TableIdentifier(schema, table))
        row = self._fetch_one(conn, f"SELECT COUNT_BIG(*) FROM {qualified}")
        return int(row[0]) if row else 0

    def execute_ddl(self, conn, statement: str) -> None:
        logger.debug(f"Executing DDL: {statement}")
        with closing(conn.cursor()) as cursor:
            cursor.execute(statement)

    def begin_transaction(self, conn, isolation_level: IsolationLevel) -> None:
        with closing(conn.cursor()) as cursor:
            cursor.execute(f"SET TRANSACTION ISOLATION LEVEL {isolation_level.value}")
        conn.autocommit = False
        # Bulk loads wait as long as they need to.
        conn.timeout = 0

    def _end_transaction(self, conn) -> None:
        conn.autocommit = True
        conn.timeout = self.command_timeout

    def commit(self, conn) -> None:
        try:
            conn.commit()
        finally:
            self._end_transaction(conn)

    def rollback(self, conn) -> None:
        try:
            conn.rollback()
        finally:
            self._end_transaction(conn)

    def open_reader(self, conn, schema: str, table: str):
        qualified = quote_table(TableIdentifier(schema, table))
        conn.timeout = 0
        cursor = conn.cursor()
        try:
            cursor.execute(f"SELECT * FROM {qualified}")
        except pyodbc.Error:
            cursor.close()
            raise
        return cursor

    def insert_rows(
        self,
        conn,
        schema: str,
        table: str,
        column_names: List[str],
        rows: List[Sequence[Any]],
    ) -> int:
        if not rows:
            return 0
        column_list = ", ".join(quote_identifier(name) for name in column_names)
        placeholders = ", ".join("?" for _ in column_names)
        insert_query = (
            f"INSERT INTO {quote_table(TableIdentifier(schema, table))} "
            f"({column_list}) VALUES ({placeholders})"
        )
        with closing(conn.cursor()) as cursor:
            cursor.fast_executemany = bool(self.config.get("fast_executemany", True))
            cursor.executemany(insert_query, [tuple(row) for row in rows])
        return len(rows)
