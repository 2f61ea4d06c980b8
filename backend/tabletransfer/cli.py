"""Command-line entry point for table transfers."""

from __future__ import annotations

import logging
import sys

import click

from tabletransfer import config
from tabletransfer.exceptions import BackendError, UnexpectedError, ValidationError
from tabletransfer.models import TransferRequest
from tabletransfer.transfer import TableTransfer

logger = logging.getLogger(__name__)

EXIT_VALIDATION = 1
EXIT_DATABASE = 3
EXIT_UNEXPECTED = 4


def _fail(message: str, exit_code: int) -> None:
    click.secho(message, fg="red", err=True)
    sys.exit(exit_code)


@click.command()
@click.option('--source-connection', default="", envvar="TABLE_TRANSFER_SOURCE_CONNECTION",
              help='ODBC connection string of the source server')
@click.option('--source-database', default="", help='Source database name')
@click.option('--source-table', default="", help='Source table, optionally schema-qualified (schema.table)')
@click.option('--dest-connection', default="", envvar="TABLE_TRANSFER_DEST_CONNECTION",
              help='ODBC connection string of the destination server')
@click.option('--dest-database', default="", help='Destination database name')
@click.option('--dest-table', default="", help='Destination table, optionally schema-qualified (schema.table)')
@click.option('--batch-size', type=click.IntRange(min=1), default=config.BATCH_SIZE, show_default=True,
              help='Rows fetched and inserted per round trip')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def transfer(source_connection, source_database, source_table,
             dest_connection, dest_database, dest_table, batch_size, verbose):
    """Copy all rows of one table into another, creating it if needed."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.INFO),
        format=config.LOG_FORMAT,
    )

    try:
        request = TransferRequest(
            source_connection=source_connection,
            source_database=source_database,
            source_table=source_table,
            destination_connection=dest_connection,
            destination_database=dest_database,
            destination_table=dest_table,
        )
        try:
            table_transfer = TableTransfer(batch_size=batch_size)
        except ImportError as e:
            raise UnexpectedError(f"{UnexpectedError.PREFIX}{e}") from e
        result = table_transfer.execute(request)
    except ValidationError as e:
        _fail(str(e), EXIT_VALIDATION)
    except BackendError as e:
        _fail(str(e), EXIT_DATABASE)
    except UnexpectedError as e:
        _fail(str(e), EXIT_UNEXPECTED)
    else:
        click.secho(result.summary(), fg="green")


def main() -> None:
    transfer(prog_name="table-transfer")


if __name__ == '__main__':
    main()
