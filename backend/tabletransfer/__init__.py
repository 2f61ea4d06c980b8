"""Single-table replication between SQL Server databases."""

from tabletransfer.connectors import BaseConnector, SQLServerConnector
from tabletransfer.exceptions import (
    BackendError,
    NotFoundError,
    SchemaError,
    SchemaMismatchError,
    TransferException,
    UnexpectedError,
    ValidationError,
)
from tabletransfer.models import (
    ColumnDef,
    IsolationLevel,
    TableIdentifier,
    TransferRequest,
    TransferResult,
)
from tabletransfer.transfer import TableTransfer, transfer_table

__all__ = [
    "BaseConnector",
    "SQLServerConnector",
    "TableTransfer",
    "transfer_table",
    "ColumnDef",
    "IsolationLevel",
    "TableIdentifier",
    "TransferRequest",
    "TransferResult",
    "TransferException",
    "ValidationError",
    "NotFoundError",
    "SchemaError",
    "SchemaMismatchError",
    "BackendError",
    "UnexpectedError",
]
