"""Parsing and quoting of SQL Server table identifiers."""

from __future__ import annotations

from tabletransfer.models import TableIdentifier

DEFAULT_SCHEMA = "dbo"


def _unbracket(text: str) -> str:
    return text.strip().strip("[]")


def parse_table_identifier(raw: str, default_schema: str = DEFAULT_SCHEMA) -> TableIdentifier:
    """Split ``schema.table`` (optionally bracketed) into its two parts.

    Every leading ``[`` and trailing ``]`` is removed from the whole text and
    from each part.

    The split happens at the first dot. Without a dot the whole text is the
    table name and ``default_schema`` is used. An empty name is returned
    as-is; the existence check reports it later.
    """
    trimmed = _unbracket(raw)
    schema, dot, table = trimmed.partition(".")
    if not dot:
        return TableIdentifier(default_schema, trimmed)
    return TableIdentifier(_unbracket(schema), _unbracket(table))


def quote_identifier(name: str) -> str:
    """Wrap a name in brackets, doubling any closing bracket inside it."""
    return "[" + name.replace("]", "]]") + "]"


def quote_table(table: TableIdentifier) -> str:
    return f"{quote_identifier(table.schema)}.{quote_identifier(table.name)}"
