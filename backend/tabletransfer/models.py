"""Data models for a single table transfer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple

from tabletransfer.exceptions import ValidationError


class Side(str, Enum):
    """Which end of the transfer an object belongs to."""
    SOURCE = "source"
    DESTINATION = "destination"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class IsolationLevel(str, Enum):
    """Transaction isolation levels understood by the connectors."""
    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SNAPSHOT = "SNAPSHOT"
    SERIALIZABLE = "SERIALIZABLE"


class TableIdentifier(NamedTuple):
    """A table name together with the schema that owns it."""

    schema: str
    name: str

    def __str__(self) -> str:
        return f"{self.schema}.{self.name}"


# Value reported by INFORMATION_SCHEMA.COLUMNS for (n)varchar(max) and varbinary(max).
UNBOUNDED_LENGTH = -1


@dataclass(frozen=True)
class ColumnDef:
    """Column metadata as reported by the catalog.

    ``char_max_length``, ``numeric_precision`` and ``numeric_scale`` are None
    when the catalog reports no value, which is not the same thing as zero.
    """

    name: str
    data_type: str
    char_max_length: Optional[int] = None
    numeric_precision: Optional[int] = None
    numeric_scale: Optional[int] = None
    is_nullable: bool = True

    @property
    def is_unbounded(self) -> bool:
        return self.char_max_length == UNBOUNDED_LENGTH

    @classmethod
    def from_catalog_row(cls, row: Sequence[Any]) -> "ColumnDef":
        """Build a column from an INFORMATION_SCHEMA.COLUMNS row.

        The row holds COLUMN_NAME, DATA_TYPE, CHARACTER_MAXIMUM_LENGTH,
        NUMERIC_PRECISION, NUMERIC_SCALE and IS_NULLABLE, in that order.
        """
        name, data_type, max_length, precision, scale, nullable = row[:6]
        return cls(
            name=str(name),
            data_type=str(data_type),
            char_max_length=None if max_length is None else int(max_length),
            numeric_precision=None if precision is None else int(precision),
            numeric_scale=None if scale is None else int(scale),
            is_nullable=str(nullable).strip().upper() == "YES",
        )


SchemaSnapshot = Tuple[ColumnDef, ...]


_REQUIRED_FIELDS = (
    ("source_connection", "source connection"),
    ("source_database", "source database"),
    ("source_table", "source table"),
    ("destination_connection", "destination connection"),
    ("destination_database", "destination database"),
    ("destination_table", "destination table"),
)


@dataclass(frozen=True)
class TransferRequest:
    """The six values a caller supplies for one transfer.

    Values are trimmed on construction. Construction fails with
    ValidationError if any of them is empty, so an instance is always valid.
    """

    source_connection: str = field(repr=False)
    source_database: str
    source_table: str
    destination_connection: str = field(repr=False)
    destination_database: str
    destination_table: str

    def __post_init__(self):
        missing = []
        for attr, label in _REQUIRED_FIELDS:
            value = getattr(self, attr)
            value = value.strip() if isinstance(value, str) else ""
            object.__setattr__(self, attr, value)
            if not value:
                missing.append(label)
        if missing:
            raise ValidationError(
                f"All fields are required. Please fill in: {', '.join(missing)}.",
                object_name=", ".join(missing),
                missing_fields=missing,
            )


class TransferResult:
    """Outcome of a successful transfer."""

    def __init__(
        self,
        rows_copied: int,
        source_database: str,
        source_table: TableIdentifier,
        destination_database: str,
        destination_table: TableIdentifier,
        table_created: bool = False,
        rows_streamed: Optional[int] = None,
        elapsed_seconds: float = 0.0,
    ):
        self.rows_copied = rows_copied
        self.source_database = source_database
        self.source_table = source_table
        self.destination_database = destination_database
        self.destination_table = destination_table
        self.table_created = table_created
        self.rows_streamed = rows_copied if rows_streamed is None else rows_streamed
        self.elapsed_seconds = elapsed_seconds

    def summary(self) -> str:
        return (
            f"Success: {self.rows_copied} rows copied from "
            f"[{self.source_database}].[{self.source_table}] to "
            f"[{self.destination_database}].[{self.destination_table}] "
            f"in a single transaction."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows_copied": self.rows_copied,
            "rows_streamed": self.rows_streamed,
            "source_database": self.source_database,
            "source_table": str(self.source_table),
            "destination_database": self.destination_database,
            "destination_table": str(self.destination_table),
            "table_created": self.table_created,
            "elapsed_seconds": self.elapsed_seconds,
        }

    def __repr__(self) -> str:
        return (
            f"TransferResult(rows_copied={self.rows_copied}, "
            f"table_created={self.table_created})"
        )
