"""Reading, comparing and recreating table shapes."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from tabletransfer.connectors.base_connector import BaseConnector
from tabletransfer.exceptions import SchemaError
from tabletransfer.identifiers import quote_identifier, quote_table
from tabletransfer.models import ColumnDef, SchemaSnapshot, Side, TableIdentifier

logger = logging.getLogger(__name__)

LENGTH_TYPES = frozenset({"char", "nchar", "varchar", "nvarchar", "binary", "varbinary"})
EXACT_NUMERIC_TYPES = frozenset({"decimal", "numeric"})

DEFAULT_PRECISION = 18
DEFAULT_SCALE = 0


def read_schema(
    connector: BaseConnector,
    conn,
    table: TableIdentifier,
    side: Side = Side.SOURCE,
) -> SchemaSnapshot:
    """Read the ordered column definitions of ``table``.

    Raises:
        SchemaError: If the catalog returns no columns.
    """
    rows = connector.fetch_column_metadata(conn, table.schema, table.name)
    columns = tuple(ColumnDef.from_catalog_row(row) for row in rows)
    if not columns:
        raise SchemaError(
            f"Unable to read schema for {side.value} table '{table}'.",
            side=side.value,
            object_name=str(table),
        )
    logger.debug(f"Read {len(columns)} columns for {side.value} table {table}")
    return columns


def _optional_equal(a: Optional[int], b: Optional[int]) -> bool:
    # None only equals None; a missing value never matches a present one.
    if (a is None) != (b is None):
        return False
    return a == b


def columns_match(a: ColumnDef, b: ColumnDef) -> bool:
    return (
        a.name.lower() == b.name.lower()
        and a.data_type.lower() == b.data_type.lower()
        and _optional_equal(a.char_max_length, b.char_max_length)
        and _optional_equal(a.numeric_precision, b.numeric_precision)
        and _optional_equal(a.numeric_scale, b.numeric_scale)
        and a.is_nullable == b.is_nullable
    )


def schemas_match(src: Sequence[ColumnDef], dst: Sequence[ColumnDef]) -> bool:
    """Compare two column lists position by position.

    Columns are paired by ordinal position, not by name: the same columns in
    a different order do not match.
    """
    if len(src) != len(dst):
        return False
    return all(columns_match(a, b) for a, b in zip(src, dst))


def build_type_spec(column: ColumnDef) -> str:
    """Render the type of a column, e.g. ``varchar(50)`` or ``decimal(18,2)``."""
    data_type = column.data_type
    base = data_type.lower()

    if base in LENGTH_TYPES:
        if column.char_max_length is None or column.is_unbounded:
            length = "max"
        else:
            length = str(column.char_max_length)
        return f"{data_type}({length})"

    if base in EXACT_NUMERIC_TYPES:
        precision = column.numeric_precision
        scale = column.numeric_scale
        if precision is None:
            precision = DEFAULT_PRECISION
        if scale is None:
            scale = DEFAULT_SCALE
        return f"{data_type}({precision},{scale})"

    return data_type


def build_create_table_sql(table: TableIdentifier, columns: Sequence[ColumnDef]) -> str:
    """Generate a CREATE TABLE statement holding only the column shapes.

    No keys, indexes, defaults or constraints are emitted.
    """
    column_defs = [
        f"{quote_identifier(col.name)} {build_type_spec(col)} "
        f"{'NULL' if col.is_nullable else 'NOT NULL'}"
        for col in columns
    ]
    return f"CREATE TABLE {quote_table(table)} ({', '.join(column_defs)});"
