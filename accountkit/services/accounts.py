"""Account service: signup, login, admin creation and guarded profile operations."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, BinaryIO

from email_validator import EmailNotValidError, validate_email

from accountkit.core.errors import (
    AccountError,
    ConflictError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from accountkit.models import Account, Role
from accountkit.schemas.account import AccountOut
from accountkit.schemas.auth import Caller
from accountkit.services.access_guard import AccessGuard

if TYPE_CHECKING:
    from accountkit.core.security import PasswordHasher, TokenIssuer
    from accountkit.services.account_store import AccountStore
    from accountkit.services.asset_store import AssetStore

logger = logging.getLogger(__name__)

# Optional leading '+', then 7-15 digits not starting with 0 (E.164 length range).
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{6,14}$")
PHONE_SEPARATORS = re.compile(r"[\s\-().]")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_phone(phone: str) -> str:
    return PHONE_SEPARATORS.sub("", phone.strip())


def normalize_identifier(identifier: str) -> str:
    """Normalize a login identifier the same way signup stored it."""
    identifier = identifier.strip()
    if "@" in identifier:
        return normalize_email(identifier)
    return normalize_phone(identifier)


def _present(value: str | None) -> bool:
    return value is not None and bool(value.strip())


@contextmanager
def _internal_errors(operation: str) -> Iterator[None]:
    """Let domain errors through; log and wrap anything else as InternalError."""
    try:
        yield
    except AccountError:
        raise
    except Exception as e:
        logger.exception("%s failed unexpectedly: %s", operation, e)
        raise InternalError() from e


class AccountService:
    """
    Orchestrates the credential store, password hasher, token issuer and asset store.

    Holds no state of its own between calls; everything persistent lives in the store.
    """

    def __init__(
        self,
        store: "AccountStore",
        hasher: "PasswordHasher",
        tokens: "TokenIssuer",
        assets: "AssetStore | None" = None,
        password_min_len: int = 5,
        password_max_len: int = 128,
        max_upload_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.assets = assets
        self.guard = AccessGuard(store)
        self.password_min_len = password_min_len
        self.password_max_len = password_max_len
        self.max_upload_bytes = max_upload_bytes

    # -- validation ---------------------------------------------------------

    def _validate_password(self, password: str) -> None:
        if not (self.password_min_len <= len(password or "") <= self.password_max_len):
            raise ValidationError(
                f"Password must be {self.password_min_len}-{self.password_max_len} characters."
            )

    @staticmethod
    def _validate_email(email: str) -> str:
        email = normalize_email(email)
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError("Invalid email address.") from e
        return email

    @staticmethod
    def _validate_phone(phone: str) -> str:
        phone = normalize_phone(phone)
        if not PHONE_PATTERN.match(phone):
            raise ValidationError("Invalid phone number.")
        return phone

    def _ensure_unused(self, email: str | None, phone: str | None) -> None:
        for identifier in (email, phone):
            if identifier and self.store.find_by_email_or_phone(identifier) is not None:
                raise ConflictError()

    # -- unauthenticated operations -----------------------------------------

    def signup(
        self,
        name: str,
        password: str,
        email: str | None = None,
        phone: str | None = None,
        profile_image: str | None = None,
    ) -> str:
        """Create a User account and return its id. Raises ValidationError or ConflictError."""
        if not _present(email) and not _present(phone):
            raise ValidationError("Either email or phone is required.")
        if not _present(name):
            raise ValidationError("Name is required.")
        self._validate_password(password)
        email = self._validate_email(email) if _present(email) else None
        phone = self._validate_phone(phone) if _present(phone) else None

        with _internal_errors("signup"):
            # Fast path for the common case; the unique indexes still decide races.
            self._ensure_unused(email, phone)
            account = Account(
                email=email,
                phone=phone,
                name=name.strip(),
                profile_image=profile_image,
                password_hash=self.hasher.hash(password),
                role=Role.USER.value,
            )
            account_id = self.store.insert(account)
        logger.info("Signup: account_id=%s", account_id)
        return account_id

    def login(self, email_or_phone: str, password: str) -> str:
        """Return a session token. Unknown identifier and wrong password both raise InvalidCredentialsError."""
        identifier = normalize_identifier(email_or_phone or "")
        with _internal_errors("login"):
            account = self.store.find_by_email_or_phone(identifier) if identifier else None
            if account is None:
                self.hasher.burn(password or "")
                logger.debug("Login failed: unknown identifier")
                raise InvalidCredentialsError()
            if not self.hasher.verify(password or "", account.password_hash):
                logger.debug("Login failed: password mismatch for account_id=%s", account.id)
                raise InvalidCredentialsError()
            token = self.tokens.issue(account.id, Role(account.role))
        logger.info("Login: account_id=%s role=%s", account.id, account.role)
        return token

    def create_admin(self, email: str, password: str, name: str = "") -> str:
        """Create an Admin account. Callers decide who may reach this; it does no auth itself."""
        if not _present(email):
            raise ValidationError("Email is required.")
        email = self._validate_email(email)
        self._validate_password(password)
        with _internal_errors("create_admin"):
            self._ensure_unused(email, None)
            account = Account(
                email=email,
                name=(name or "").strip(),
                password_hash=self.hasher.hash(password),
                role=Role.ADMIN.value,
            )
            account_id = self.store.insert(account)
        logger.info("Admin created: account_id=%s", account_id)
        return account_id

    def authenticate(self, token: str) -> Caller:
        """Verify a session token; raises a TokenError subclass when it is not usable."""
        return self.tokens.verify(token)

    # -- guarded operations -------------------------------------------------

    def get_account(self, caller: Caller | None, target_id: str) -> AccountOut:
        with _internal_errors("get_account"):
            account = self.guard.authorize(caller, target_id)
            return AccountOut.model_validate(account)

    def modify_profile(
        self,
        caller: Caller | None,
        target_id: str,
        name: str | None = None,
        profile_image: str | None = None,
    ) -> AccountOut:
        """Partial update: only the fields that are not None change."""
        with _internal_errors("modify_profile"):
            account = self.guard.authorize(caller, target_id)
            if name is not None and not name.strip():
                raise ValidationError("Name must not be empty.")
            fields: dict[str, str] = {}
            if name is not None:
                fields["name"] = name.strip()
            if profile_image is not None:
                fields["profile_image"] = profile_image
            if fields:
                account = self.store.update(target_id, fields)
            return AccountOut.model_validate(account)

    def upload_profile_image(
        self,
        caller: Caller | None,
        target_id: str,
        stream: BinaryIO | None,
        filename: str | None,
        content_type: str | None = None,
    ) -> AccountOut:
        """
        Store the image through the asset store and point the account at it.

        The payload is only read after the guard passes, and never more than
        max_upload_bytes + 1 bytes of it. If the account disappears before the
        reference is saved, the stored file is removed again.
        """
        with _internal_errors("upload_profile_image"):
            self.guard.authorize(caller, target_id)
            content = stream.read(self.max_upload_bytes + 1) if stream is not None else b""
            if not content:
                raise ValidationError("No file uploaded.")
            if len(content) > self.max_upload_bytes:
                raise ValidationError(
                    f"File size must not exceed {self.max_upload_bytes // 1024} KB."
                )
            if self.assets is None:
                logger.error("Profile image upload attempted without an asset store")
                raise InternalError()
            reference = self.assets.save(content, filename or "", content_type)
            try:
                account = self.store.update(target_id, {"profile_image": reference})
            except Exception:
                self.assets.delete(reference)
                raise
        logger.info("Profile image updated: account_id=%s", target_id)
        return AccountOut.model_validate(account)

    def delete_account(self, caller: Caller | None, target_id: str) -> None:
        """Delete the account; a concurrent delete between check and removal raises NotFoundError."""
        with _internal_errors("delete_account"):
            self.guard.authorize(caller, target_id)
            if not self.store.delete(target_id):
                raise NotFoundError()
        logger.info(
            "Account deleted: account_id=%s by=%s",
            target_id,
            caller.account_id if caller else None,
        )

    def list_accounts(self, caller: Caller | None) -> list[AccountOut]:
        with _internal_errors("list_accounts"):
            self.guard.require_admin(caller)
            return [AccountOut.model_validate(a) for a in self.store.list_all()]
