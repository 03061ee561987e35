"""Translate domain errors into HTTP responses."""

from fastapi import HTTPException

from accountkit.core.errors import AccountError, NotAuthenticatedError


def to_http_exception(exc: AccountError) -> HTTPException:
    """Map an AccountError to an HTTPException with the same status and a safe message."""
    headers = None
    if isinstance(exc, NotAuthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(status_code=exc.status_code, detail=exc.message, headers=headers)
