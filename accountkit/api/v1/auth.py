"""Signup, login and the auth dependencies (service wiring, caller identity)."""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from accountkit.api.v1.errors import to_http_exception
from accountkit.core.config import get_settings
from accountkit.core.database import get_db
from accountkit.core.errors import AccountError, TokenError
from accountkit.core.security import get_password_hasher, get_token_issuer
from accountkit.schemas.auth import (
    Caller,
    CallerResponse,
    LoginRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from accountkit.services.account_store import SqlAccountStore
from accountkit.services.accounts import AccountService
from accountkit.services.asset_store import LocalAssetStore

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


@lru_cache
def get_asset_store() -> LocalAssetStore:
    """Process-wide local asset store configured from settings."""
    settings = get_settings()
    return LocalAssetStore(
        base_dir=settings.UPLOAD_DIR,
        url_prefix=settings.UPLOAD_URL_PREFIX,
        max_bytes=settings.MAX_UPLOAD_BYTES,
    )


def get_account_service(
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[LocalAssetStore, Depends(get_asset_store)],
) -> AccountService:
    """Dependency: an AccountService bound to this request's DB session."""
    settings = get_settings()
    return AccountService(
        store=SqlAccountStore(db),
        hasher=get_password_hasher(),
        tokens=get_token_issuer(),
        assets=assets,
        password_min_len=settings.PASSWORD_MIN_LEN,
        password_max_len=settings.PASSWORD_MAX_LEN,
        max_upload_bytes=settings.MAX_UPLOAD_BYTES,
    )


def get_optional_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Caller | None:
    """
    Dependency: caller identity from the Bearer token, or None when no token was sent.

    A token that is present but expired, tampered with or malformed is rejected with 401.
    """
    if credentials is None:
        return None
    try:
        return get_token_issuer().verify(credentials.credentials)
    except TokenError as e:
        logger.info("Rejected token: %s", e.code)
        raise to_http_exception(e) from e


def get_current_caller(
    caller: Annotated[Caller | None, Depends(get_optional_caller)],
) -> Caller:
    """Dependency: require a valid Bearer token. Raises 401 if missing."""
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> SignupResponse:
    """Register a new User account with email and/or phone. No authentication required."""
    try:
        account_id = service.signup(
            name=body.name,
            password=body.password,
            email=body.email,
            phone=body.phone,
            profile_image=body.profile_image,
        )
    except AccountError as e:
        raise to_http_exception(e) from e
    return SignupResponse(id=account_id)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> TokenResponse:
    """
    Authenticate with email or phone and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    try:
        token = service.login(body.identifier, body.password)
    except AccountError as e:
        raise to_http_exception(e) from e
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=service.tokens.expire_minutes * 60,
    )


@router.get("/me", response_model=CallerResponse)
def me(caller: Annotated[Caller, Depends(get_current_caller)]) -> CallerResponse:
    """Return the account id and role carried by the current token."""
    return CallerResponse(account_id=caller.account_id, role=caller.role)
