"""
Shared fixtures.

- **`servers`**: Dictionary of in-memory fake servers keyed by connection
  target. Pre-populated with a ``src-server`` holding the ``Sales`` database
  (``dbo.Customers``, 3 rows) and an empty ``dst-server`` holding the
  ``Archive`` database.
- **`connector`**: A ``FakeConnector`` serving ``servers``.
- **`request_factory`**: Builds a ``TransferRequest`` with defaults pointing
  at the fixture tables; override any field by keyword.
"""

import pytest

from tabletransfer.models import TransferRequest

from fakes import CUSTOMER_COLUMNS, CUSTOMER_ROWS, FakeConnector, FakeServer


@pytest.fixture
def servers():
    src = FakeServer()
    src.add_table("Sales", "dbo", "Customers", CUSTOMER_COLUMNS, CUSTOMER_ROWS)
    dst = FakeServer().add_database("Archive")
    return {"src-server": src, "dst-server": dst}


@pytest.fixture
def connector(servers):
    return FakeConnector(servers)


@pytest.fixture
def request_factory():
    def make(**overrides):
        values = dict(
            source_connection="src-server",
            source_database="Sales",
            source_table="dbo.Customers",
            destination_connection="dst-server",
            destination_database="Archive",
            destination_table="dbo.Customers2",
        )
        values.update(overrides)
        return TransferRequest(**values)

    return make
