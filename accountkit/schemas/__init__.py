"""Pydantic request/response schemas."""

from accountkit.schemas.account import AccountOut, AccountsListResponse, AccountUpdate
from accountkit.schemas.auth import (
    AdminCreateRequest,
    Caller,
    CallerResponse,
    LoginRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from accountkit.schemas.health import HealthResponse

__all__ = [
    "AccountOut",
    "AccountUpdate",
    "AccountsListResponse",
    "AdminCreateRequest",
    "Caller",
    "CallerResponse",
    "HealthResponse",
    "LoginRequest",
    "SignupRequest",
    "SignupResponse",
    "TokenResponse",
]
