"""Database connectors package."""

from .base_connector import BaseConnector
from .sqlserver import SQLServerConnector

__all__ = [
    "BaseConnector",
    "SQLServerConnector",
]
