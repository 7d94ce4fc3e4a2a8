"""
This file contains custom, application-specific exceptions.

They are raised by the service layer and carry their HTTP status, so the
API routes can let them propagate unchanged.
"""
from fastapi import HTTPException, status


class InvalidArgumentError(HTTPException):
    """Raised for malformed or missing input, including duplicate active requests."""
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    """Raised when a referenced request, user or subject does not exist."""
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidStateError(HTTPException):
    """Raised when an operation is not legal for the request's current status."""
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class UnauthorizedError(HTTPException):
    """Raised when a user's identity or role does not permit an action."""
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
