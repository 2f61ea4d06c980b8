"""Runtime settings read from the environment (and an optional .env file)."""

import os

from dotenv import load_dotenv

load_dotenv()

BATCH_SIZE = int(os.getenv("TABLE_TRANSFER_BATCH_SIZE", "1000"))
CONNECT_TIMEOUT = int(os.getenv("TABLE_TRANSFER_CONNECT_TIMEOUT", "30"))
# Applies to catalog probes and DDL; the bulk copy always runs without a timeout.
COMMAND_TIMEOUT = int(os.getenv("TABLE_TRANSFER_COMMAND_TIMEOUT", "30"))
ODBC_DRIVER = os.getenv("TABLE_TRANSFER_ODBC_DRIVER") or None
LOG_LEVEL = os.getenv("TABLE_TRANSFER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def sqlserver_config() -> dict:
    """Connector configuration assembled from the settings above."""
    return {
        "driver": ODBC_DRIVER,
        "connect_timeout": CONNECT_TIMEOUT,
        "command_timeout": COMMAND_TIMEOUT,
        "fast_executemany": True,
    }
