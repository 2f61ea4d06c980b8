"""Copy one table between SQL Server databases in a single transaction."""

from __future__ import annotations

import logging
import time
from contextlib import ExitStack, closing
from typing import Optional, Tuple, Type

from tabletransfer import config
from tabletransfer.connectors.base_connector import BaseConnector
from tabletransfer.connectors.sqlserver import SQLServerConnector
from tabletransfer.exceptions import (
    BackendError,
    SchemaMismatchError,
    TransferException,
    UnexpectedError,
)
from tabletransfer.identifiers import parse_table_identifier
from tabletransfer.models import (
    IsolationLevel,
    Side,
    TableIdentifier,
    TransferRequest,
    TransferResult,
)
from tabletransfer.schema_service import (
    build_create_table_sql,
    read_schema,
    schemas_match,
)
from tabletransfer.transaction import Transaction
from tabletransfer.validation import ensure_database_exists, ensure_table_exists

logger = logging.getLogger(__name__)


class TableTransfer:
    """Replicate a source table into a destination table.

    The destination table is created from the source columns when missing,
    or must already have exactly the same columns in the same order. All
    rows are then copied under one destination transaction. Running the
    same transfer twice copies the rows twice.
    """

    def __init__(
        self,
        source_connector: Optional[BaseConnector] = None,
        target_connector: Optional[BaseConnector] = None,
        batch_size: Optional[int] = None,
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ):
        """Initialize the transfer.

        Args:
            source_connector: Connector used for the source side. Defaults to
                a SQLServerConnector built from the environment settings.
            target_connector: Connector used for the destination side.
                Defaults to the source connector.
            batch_size: Rows fetched and inserted per round trip.
            isolation_level: Isolation level of the copy transaction.
        """
        if source_connector is None:
            source_connector = SQLServerConnector(config.sqlserver_config())
        self.source = source_connector
        self.target = target_connector or source_connector
        self.batch_size = config.BATCH_SIZE if batch_size is None else batch_size
        if self.batch_size < 1:
            raise ValueError("batch_size must be a positive integer")
        self.isolation_level = isolation_level

    @property
    def backend_errors(self) -> Tuple[Type[BaseException], ...]:
        return tuple(self.source.backend_errors) + tuple(self.target.backend_errors)

    def execute(self, request: TransferRequest) -> TransferResult:
        """Run the transfer described by ``request``.

        Raises:
            ValidationError: For problems the user can correct.
            BackendError: When the database client reports a failure.
            UnexpectedError: For anything else.
        """
        try:
            return self._execute(request)
        except TransferException:
            raise
        except self.backend_errors as e:
            logger.error(f"Database error during transfer: {e}")
            raise BackendError(f"{BackendError.PREFIX}{e}") from e
        except Exception as e:
            logger.exception("Unexpected error during transfer")
            raise UnexpectedError(f"{UnexpectedError.PREFIX}{e}") from e

    def _open(
        self,
        stack: ExitStack,
        connector: BaseConnector,
        target: str,
        database: str,
        side: Side,
    ):
        conn = stack.enter_context(closing(connector.connect(target)))
        ensure_database_exists(connector, conn, database, side)
        return conn

    def _execute(self, request: TransferRequest) -> TransferResult:
        started = time.monotonic()
        src_table = parse_table_identifier(request.source_table, self.source.default_schema)
        dst_table = parse_table_identifier(request.destination_table, self.target.default_schema)
        logger.info(
            f"Starting table transfer: {request.source_database}.{src_table} -> "
            f"{request.destination_database}.{dst_table}"
        )

        with ExitStack() as stack:
            src_conn = self._open(
                stack, self.source, request.source_connection, request.source_database, Side.SOURCE
            )
            dst_conn = self._open(
                stack, self.target, request.destination_connection,
                request.destination_database, Side.DESTINATION,
            )
            self.source.use_database(src_conn, request.source_database)
            self.target.use_database(dst_conn, request.destination_database)

            ensure_table_exists(self.source, src_conn, src_table, request.source_database, Side.SOURCE)
            src_columns = read_schema(self.source, src_conn, src_table, Side.SOURCE)

            table_created = False
            if self.target.table_exists(dst_conn, dst_table.schema, dst_table.name):
                dst_columns = read_schema(self.target, dst_conn, dst_table, Side.DESTINATION)
                if not schemas_match(src_columns, dst_columns):
                    raise SchemaMismatchError(
                        f"Destination table '{dst_table}' exists but does not match the "
                        f"source schema. Please correct the destination table name.",
                        side=Side.DESTINATION.value,
                        object_name=str(dst_table),
                    )
                logger.info(f"Destination table {dst_table} exists with a matching schema")
            else:
                create_sql = build_create_table_sql(dst_table, src_columns)
                self.target.execute_ddl(dst_conn, create_sql)
                table_created = True
                logger.info(f"Created destination table {dst_table}")

            rows_copied, rows_streamed = self._copy_rows(src_conn, src_table, dst_conn, dst_table)

        elapsed = time.monotonic() - started
        logger.info(
            f"Table transfer completed: {rows_copied} rows copied to "
            f"{request.destination_database}.{dst_table} in {elapsed:.2f}s"
        )
        return TransferResult(
            rows_copied=rows_copied,
            source_database=request.source_database,
            source_table=src_table,
            destination_database=request.destination_database,
            destination_table=dst_table,
            table_created=table_created,
            rows_streamed=rows_streamed,
            elapsed_seconds=elapsed,
        )

    def copy_rows(
        self,
        src_conn,
        src_table: TableIdentifier,
        dst_conn,
        dst_table: TableIdentifier,
    ) -> int:
        """Stream every source row into the destination in one transaction.

        Identity columns of the destination are left out of the inserts so
        the server assigns their values.

        Returns:
            The source row count taken before streaming began.
        """
        return self._copy_rows(src_conn, src_table, dst_conn, dst_table)[0]

    def _copy_rows(
        self,
        src_conn,
        src_table: TableIdentifier,
        dst_conn,
        dst_table: TableIdentifier,
    ) -> Tuple[int, int]:
        # Returns (pre-counted rows, streamed rows); they differ only when the
        # source changes between the count and the read.
        generated = {
            name.lower()
            for name in self.target.identity_columns(dst_conn, dst_table.schema, dst_table.name)
        }
        if generated:
            logger.info(f"Leaving identity columns of {dst_table} to the server: {sorted(generated)}")
        with Transaction(self.target, dst_conn, self.isolation_level) as tx:
            source_count = self.source.get_table_row_count(src_conn, src_table.schema, src_table.name)
            logger.info(f"Copying {source_count} rows from {src_table} to {dst_table}")

            streamed = 0
            with closing(self.source.open_reader(src_conn, src_table.schema, src_table.name)) as reader:
                names = [desc[0] for desc in reader.description]
                # Identity values are assigned by the destination.
                keep = [i for i, name in enumerate(names) if name.lower() not in generated]
                column_names = [names[i] for i in keep]
                while True:
                    rows = reader.fetchmany(self.batch_size)
                    if not rows:
                        break
                    if len(keep) != len(names):
                        rows = [tuple(row[i] for i in keep) for row in rows]
                    streamed += self.target.insert_rows(
                        dst_conn, dst_table.schema, dst_table.name, column_names, rows
                    )
                    logger.debug(f"Inserted {streamed} rows so far into {dst_table}")

            tx.commit()

        if streamed != source_count:
            logger.warning(
                f"Source table {src_table} changed during the copy: counted {source_count} "
                f"rows but streamed {streamed}"
            )
        return source_count, streamed


def transfer_table(
    source_connection: str,
    source_database: str,
    source_table: str,
    destination_connection: str,
    destination_database: str,
    destination_table: str,
    connector: Optional[BaseConnector] = None,
    batch_size: Optional[int] = None,
) -> TransferResult:
    """Validate the six inputs and run one transfer with them."""
    request = TransferRequest(
        source_connection=source_connection,
        source_database=source_database,
        source_table=source_table,
        destination_connection=destination_connection,
        destination_database=destination_database,
        destination_table=destination_table,
    )
    return TableTransfer(connector, batch_size=batch_size).execute(request)
