"""Custom exception classes for table transfers."""

from __future__ import annotations


class TransferException(Exception):
    """Base exception for all table transfer errors."""
    pass


class ValidationError(TransferException):
    """Exception raised for problems the user can fix by correcting input."""

    def __init__(self, message: str, side: str = None, object_name: str = None, **kwargs):
        super().__init__(message)
        self.side = side
        self.object_name = object_name
        self.details = kwargs


class NotFoundError(ValidationError):
    """Exception raised when a database or table does not exist."""
    pass


class SchemaError(ValidationError):
    """Exception raised when the column metadata of a table cannot be read."""
    pass


class SchemaMismatchError(ValidationError):
    """Exception raised when an existing destination table has a different shape."""
    pass


class BackendError(TransferException):
    """Exception raised when the database client reports a failure."""

    PREFIX = "Database error: "

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.details = kwargs


class UnexpectedError(TransferException):
    """Exception raised for any failure that is neither validation nor backend."""

    PREFIX = "Unexpected error: "

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.details = kwargs
