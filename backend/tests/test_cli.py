import pytest
from click.testing import CliRunner

from tabletransfer.cli import EXIT_DATABASE, EXIT_UNEXPECTED, EXIT_VALIDATION, transfer
from tabletransfer.transfer import TableTransfer

ARGS = [
    "--source-connection", "src-server",
    "--source-database", "Sales",
    "--source-table", "dbo.Customers",
    "--dest-connection", "dst-server",
    "--dest-database", "Archive",
    "--dest-table", "dbo.Customers2",
]


def with_option(name, value):
    args = list(ARGS)
    args[args.index(name) + 1] = value
    return args


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def table_transfer(mocker, connector):
    return mocker.patch(
        "tabletransfer.cli.TableTransfer",
        side_effect=lambda batch_size: TableTransfer(connector, batch_size=batch_size),
    )


def test_success(runner, table_transfer, servers):
    result = runner.invoke(transfer, ARGS)

    assert result.exit_code == 0, result.output
    assert (
        "Success: 3 rows copied from [Sales].[dbo.Customers] to "
        "[Archive].[dbo.Customers2] in a single transaction."
    ) in result.output
    assert len(servers["dst-server"].table("Archive", "dbo", "Customers2").rows) == 3


def test_batch_size_is_forwarded(runner, table_transfer):
    result = runner.invoke(transfer, ARGS + ["--batch-size", "2"])
    assert result.exit_code == 0, result.output
    table_transfer.assert_called_once_with(batch_size=2)


def test_connection_from_environment(runner, table_transfer):
    args = ARGS[2:]
    result = runner.invoke(transfer, args, env={"TABLE_TRANSFER_SOURCE_CONNECTION": "src-server"})
    assert result.exit_code == 0, result.output


def test_blank_field(runner, table_transfer):
    result = runner.invoke(transfer, with_option("--dest-table", "   "))

    assert result.exit_code == EXIT_VALIDATION
    assert "All fields are required. Please fill in: destination table." in result.output
    table_transfer.assert_not_called()


def test_missing_database(runner, table_transfer):
    result = runner.invoke(transfer, with_option("--source-database", "Nope"))

    assert result.exit_code == EXIT_VALIDATION
    assert "Source database 'Nope' does not exist." in result.output


def test_database_error(runner, table_transfer):
    result = runner.invoke(transfer, with_option("--dest-connection", "nowhere"))

    assert result.exit_code == EXIT_DATABASE
    assert "Database error: " in result.output


def test_unexpected_error(runner, table_transfer, connector, mocker):
    mocker.patch.object(connector, "open_reader", side_effect=RuntimeError("reader broke"))
    result = runner.invoke(transfer, ARGS)

    assert result.exit_code == EXIT_UNEXPECTED
    assert "Unexpected error: reader broke" in result.output


def test_missing_driver_package(runner, mocker):
    mocker.patch("tabletransfer.cli.TableTransfer", side_effect=ImportError("pyodbc is not installed."))
    result = runner.invoke(transfer, ARGS)

    assert result.exit_code == EXIT_UNEXPECTED
    assert "Unexpected error: pyodbc is not installed." in result.output


def test_rejects_non_positive_batch_size(runner, table_transfer):
    result = runner.invoke(transfer, ARGS + ["--batch-size", "0"])
    assert result.exit_code == 2
    table_transfer.assert_not_called()
