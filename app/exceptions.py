from typing import Optional
from fastapi import HTTPException, status


class WorkLogError(Exception):
    """Base class for errors raised by the work-log core."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self):
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class InvalidInput(WorkLogError):
    """Malformed hour, unknown status or a missing field. Nothing was written."""


class NotAuthorized(WorkLogError):
    """The caller's company does not match the company being written or watched."""


class StoreUnavailable(WorkLogError):
    """The record store could not complete a read or write. Safe to retry."""


def get_user_exception():
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    return credentials_exception


def get_forbidden_exception(detail: str = "You are not authorized to access this resource"):
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def get_http_exception(error: WorkLogError):
    """Translate a core error into the HTTPException a router should raise."""
    if isinstance(error, InvalidInput):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
    if isinstance(error, NotAuthorized):
        return get_forbidden_exception(error.message)
    if isinstance(error, StoreUnavailable):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Work log store unavailable during {error.operation or 'request'}, please retry",
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"An exception occured - {error}")
