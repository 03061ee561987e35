"""Account routes: admin creation, listing, read, profile update, image upload and delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from accountkit.api.v1.auth import get_account_service, get_optional_caller
from accountkit.api.v1.errors import to_http_exception
from accountkit.core.config import get_settings
from accountkit.core.errors import AccountError
from accountkit.schemas.account import AccountOut, AccountsListResponse, AccountUpdate
from accountkit.schemas.auth import AdminCreateRequest, Caller, SignupResponse
from accountkit.services.accounts import AccountService

router = APIRouter()
admins_router = APIRouter()

OptionalCaller = Annotated[Caller | None, Depends(get_optional_caller)]
Service = Annotated[AccountService, Depends(get_account_service)]


@admins_router.post("", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def create_admin(body: AdminCreateRequest, caller: OptionalCaller, service: Service) -> SignupResponse:
    """
    Create an Admin account.

    Requires an authenticated Admin unless ADMIN_SIGNUP_OPEN is enabled.
    Bootstrap the first Admin with `python -m accountkit.scripts.create_admin`.
    """
    try:
        if not get_settings().ADMIN_SIGNUP_OPEN:
            service.guard.require_admin(caller)
        account_id = service.create_admin(body.email, body.password, name=body.name)
    except AccountError as e:
        raise to_http_exception(e) from e
    return SignupResponse(id=account_id, message="Admin created successfully")


@router.get("", response_model=AccountsListResponse)
def list_accounts(caller: OptionalCaller, service: Service) -> AccountsListResponse:
    """List all accounts (admin only)."""
    try:
        accounts = service.list_accounts(caller)
    except AccountError as e:
        raise to_http_exception(e) from e
    return AccountsListResponse(accounts=accounts)


@router.get("/{account_id}", response_model=AccountOut)
def get_account(account_id: str, caller: OptionalCaller, service: Service) -> AccountOut:
    """Return one account (owner or admin)."""
    try:
        return service.get_account(caller, account_id)
    except AccountError as e:
        raise to_http_exception(e) from e


@router.patch("/{account_id}", response_model=AccountOut)
def modify_profile(
    account_id: str,
    body: AccountUpdate,
    caller: OptionalCaller,
    service: Service,
) -> AccountOut:
    """Update name and/or profile_image (owner or admin). Omitted fields are unchanged."""
    try:
        return service.modify_profile(
            caller,
            account_id,
            name=body.name,
            profile_image=body.profile_image,
        )
    except AccountError as e:
        raise to_http_exception(e) from e


@router.post("/{account_id}/profile-image", response_model=AccountOut)
def upload_profile_image(
    account_id: str,
    caller: OptionalCaller,
    service: Service,
    file: Annotated[UploadFile | None, File()] = None,
) -> AccountOut:
    """
    Upload a profile image as multipart/form-data with a field named `file`.

    The image is stored by the asset store and the account's profile_image is
    set to the returned reference.
    """
    try:
        return service.upload_profile_image(
            caller,
            account_id,
            stream=file.file if file is not None else None,
            filename=file.filename if file is not None else None,
            content_type=file.content_type if file is not None else None,
        )
    except AccountError as e:
        raise to_http_exception(e) from e


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(account_id: str, caller: OptionalCaller, service: Service) -> Response:
    """Delete an account (owner or admin)."""
    try:
        service.delete_account(caller, account_id)
    except AccountError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
