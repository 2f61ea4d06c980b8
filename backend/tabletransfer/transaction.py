"""One-shot transaction wrapper around a connector."""

from __future__ import annotations

import logging
from enum import Enum

from tabletransfer.connectors.base_connector import BaseConnector
from tabletransfer.models import IsolationLevel

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"


class Transaction:
    """A transaction that can be completed exactly once.

    Use it as a context manager. Leaving the block while the transaction is
    still active rolls it back, and the exception that caused the exit keeps
    propagating.

        with Transaction(connector, conn) as tx:
            ...
            tx.commit()
    """

    def __init__(
        self,
        connector: BaseConnector,
        conn,
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ):
        self.connector = connector
        self.conn = conn
        self.isolation_level = isolation_level
        self.state = TransactionState.PENDING

    def __enter__(self) -> "Transaction":
        if self.state is not TransactionState.PENDING:
            raise RuntimeError("Transaction has already been used")
        self.connector.begin_transaction(self.conn, self.isolation_level)
        self.state = TransactionState.ACTIVE
        logger.debug(f"Transaction started ({self.isolation_level.value})")
        return self

    def _ensure_active(self) -> None:
        if self.state is not TransactionState.ACTIVE:
            raise RuntimeError(f"Transaction is not active (state: {self.state.value})")

    def commit(self) -> None:
        self._ensure_active()
        self.connector.commit(self.conn)
        self.state = TransactionState.COMMITTED
        logger.debug("Transaction committed")

    def rollback(self) -> None:
        self._ensure_active()
        # Marked first so a failing rollback is never retried.
        self.state = TransactionState.ROLLED_BACK
        self.connector.rollback(self.conn)
        logger.info("Transaction rolled back")

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.state is TransactionState.ACTIVE:
            if exc_type is None:
                self.rollback()
                raise RuntimeError("Transaction block exited without commit; rolled back")
            try:
                self.rollback()
            except Exception:
                logger.exception("Rollback failed")
        return False
