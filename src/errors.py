"""
Reconciler errors.

Every failure inside the reconciler surfaces as one of these exceptions and
is returned to the driving engine untouched.
"""

from typing import Optional


class ReconcilerError(Exception):
    """Base class for all reconciler errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ClientUnavailable(ReconcilerError):
    """Raised when the remote-call client cannot be obtained."""


class RemoteNotFound(ReconcilerError):
    """Raised when the remote system reports that an object does not exist."""

    def __init__(self, operation: str, identifier: str):
        self.operation = operation
        self.identifier = identifier
        super().__init__(f"{operation}: enterprise '{identifier}' not found")


class RemoteFailure(ReconcilerError):
    """Raised for any remote call failure other than not-found."""

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: Optional[int] = None,
        response_body: str = "",
    ):
        self.operation = operation
        self.status_code = status_code
        self.response_body = response_body
        status = f" (status {status_code})" if status_code is not None else ""
        super().__init__(f"{operation} failed{status}: {message}")


class InvalidState(ReconcilerError):
    """Raised when an operation is invoked in the wrong lifecycle state."""


class AttributeAssignmentFailure(ReconcilerError):
    """Raised when a value cannot be assigned to an instance attribute."""

    def __init__(self, attribute: str, reason: str):
        self.attribute = attribute
        self.reason = reason
        super().__init__(f"Error setting {attribute}: {reason}")
