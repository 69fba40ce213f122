"""
Error classification for Azure Storage calls.

Azure SDK failures are mapped once, at the point of each network call, onto a
small set of error kinds that drive the operator guidance printed by the
reporter.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Optional

from azure.core.exceptions import ClientAuthenticationError


class ErrorKind(Enum):
    """Failure categories a run can end with."""
    CONFIG_INVALID = "config_invalid"
    AUTHENTICATION_FAILED = "authentication_failed"
    PERMISSION_DENIED = "permission_denied"
    ACCOUNT_NOT_FOUND = "account_not_found"
    UNEXPECTED = "unexpected"


_STATUS_KINDS = {
    401: ErrorKind.AUTHENTICATION_FAILED,
    403: ErrorKind.PERMISSION_DENIED,
    404: ErrorKind.ACCOUNT_NOT_FOUND,
}


class StorageOperationError(Exception):
    """A classified failure of a single storage operation."""

    def __init__(self, kind: ErrorKind, operation: str, cause: Exception):
        super().__init__(f"{operation} failed: {cause}")
        self.kind = kind
        self.operation = operation
        self.cause = cause

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.cause, "status_code", None)


def classify(error: Exception) -> ErrorKind:
    """Map an exception raised by the Azure SDK to an ErrorKind."""
    status_code = getattr(error, "status_code", None)
    if status_code in _STATUS_KINDS:
        return _STATUS_KINDS[status_code]
    # Credential chains raise without an HTTP status when no source can issue a token
    if isinstance(error, ClientAuthenticationError):
        return ErrorKind.AUTHENTICATION_FAILED
    return ErrorKind.UNEXPECTED


@contextmanager
def storage_call(operation: str):
    """
    Run a storage operation and raise StorageOperationError on failure.

    Args:
        operation: Short description used in logs and error messages

    Raises:
        StorageOperationError: If the wrapped block raises
    """
    try:
        yield
    except Exception as e:
        kind = classify(e)
        logging.debug(f"{operation} failed with {type(e).__name__} classified as {kind.name}")
        raise StorageOperationError(kind, operation, e) from e
