from dataclasses import replace

import pytest

from tabletransfer.exceptions import SchemaError, ValidationError
from tabletransfer.models import ColumnDef, Side, TableIdentifier
from tabletransfer.schema_service import (
    build_create_table_sql,
    build_type_spec,
    read_schema,
    schemas_match,
)

from fakes import CUSTOMER_COLUMNS, FakeConnector, FakeServer

ID = ColumnDef("Id", "int", None, 10, 0, False)
NAME = ColumnDef("Name", "varchar", 50, None, None, True)
PRICE = ColumnDef("Price", "decimal", None, 10, 2, True)


class TestSchemasMatch:
    def test_reflexive(self):
        cols = (ID, NAME, PRICE)
        assert schemas_match(cols, cols)
        assert schemas_match((), ())

    def test_order_matters(self):
        assert not schemas_match((ID, NAME), (NAME, ID))

    def test_count_differs(self):
        assert not schemas_match((ID, NAME), (ID, NAME, PRICE))
        assert not schemas_match((ID, NAME, PRICE), (ID, NAME))

    def test_names_and_types_ignore_case(self):
        other = (replace(ID, name="ID", data_type="INT"), replace(NAME, name="name", data_type="VarChar"))
        assert schemas_match((ID, NAME), other)

    @pytest.mark.parametrize("change", [
        {"name": "Label"},
        {"data_type": "nvarchar"},
        {"char_max_length": 51},
        {"char_max_length": None},
        {"char_max_length": -1},
        {"numeric_precision": 10},
        {"numeric_scale": 0},
        {"is_nullable": False},
    ])
    def test_any_attribute_difference_is_a_mismatch(self, change):
        assert not schemas_match((ID, NAME), (ID, replace(NAME, **change)))

    @pytest.mark.parametrize("change", [
        {"numeric_precision": 12},
        {"numeric_precision": None},
        {"numeric_scale": 3},
        {"numeric_scale": None},
    ])
    def test_numeric_metadata_difference_is_a_mismatch(self, change):
        assert not schemas_match((PRICE,), (replace(PRICE, **change),))

    def test_zero_is_not_the_same_as_missing(self):
        assert not schemas_match((replace(PRICE, numeric_scale=0),), (replace(PRICE, numeric_scale=None),))


class TestBuildTypeSpec:
    def test_explicit_length(self):
        assert build_type_spec(NAME) == "varchar(50)"

    def test_unbounded_length(self):
        assert build_type_spec(replace(NAME, char_max_length=-1)) == "varchar(max)"

    def test_missing_length(self):
        assert build_type_spec(replace(NAME, char_max_length=None)) == "varchar(max)"

    @pytest.mark.parametrize("data_type", ["char", "nchar", "nvarchar", "binary", "varbinary", "NVARCHAR"])
    def test_length_family(self, data_type):
        col = ColumnDef("c", data_type, 16)
        assert build_type_spec(col) == f"{data_type}(16)"

    def test_decimal_precision_and_scale(self):
        assert build_type_spec(PRICE) == "decimal(10,2)"

    def test_decimal_defaults(self):
        assert build_type_spec(ColumnDef("Amount", "decimal")) == "decimal(18,0)"
        assert build_type_spec(ColumnDef("Amount", "numeric", numeric_precision=9)) == "numeric(9,0)"

    @pytest.mark.parametrize("data_type", ["int", "bigint", "bit", "datetime2", "date", "float", "text", "ntext", "image"])
    def test_other_types_are_bare(self, data_type):
        assert build_type_spec(ColumnDef("c", data_type, 16, 53, 7)) == data_type


def test_build_create_table_sql():
    sql = build_create_table_sql(TableIdentifier("dbo", "Customers2"), (ID, NAME, PRICE))
    assert sql == (
        "CREATE TABLE [dbo].[Customers2] ("
        "[Id] int NOT NULL, [Name] varchar(50) NULL, [Price] decimal(10,2) NULL);"
    )


def test_build_create_table_sql_has_no_constraints():
    sql = build_create_table_sql(TableIdentifier("etl", "t"), (ID,))
    for keyword in ("PRIMARY KEY", "FOREIGN KEY", "DEFAULT", "CHECK", "INDEX", "IDENTITY"):
        assert keyword not in sql


def _connected(server):
    connector = FakeConnector({"srv": server})
    conn = connector.connect("srv")
    connector.use_database(conn, "Sales")
    return connector, conn


def test_read_schema_preserves_order_and_metadata():
    connector, conn = _connected(FakeServer().add_database("Sales"))
    conn.server.add_table("Sales", "dbo", "Customers", CUSTOMER_COLUMNS)
    columns = read_schema(connector, conn, TableIdentifier("dbo", "Customers"))
    assert [c.name for c in columns] == ["Id", "Name", "Balance"]
    assert columns[0] == ColumnDef("Id", "int", None, 10, 0, False)
    assert columns[1].char_max_length == 100
    assert columns[2].numeric_precision == 10 and columns[2].numeric_scale == 2


def test_read_schema_without_columns_fails():
    connector, conn = _connected(FakeServer().add_database("Sales"))
    conn.server.add_table("Sales", "dbo", "Empty", [])
    with pytest.raises(SchemaError) as exc_info:
        read_schema(connector, conn, TableIdentifier("dbo", "Empty"), Side.SOURCE)
    assert isinstance(exc_info.value, ValidationError)
    assert str(exc_info.value) == "Unable to read schema for source table 'dbo.Empty'."
