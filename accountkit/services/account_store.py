"""Credential store: the single persistence interface for accounts."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from accountkit.core.errors import ConflictError, InternalError, NotFoundError
from accountkit.models import Account

logger = logging.getLogger(__name__)

# Columns that may be changed through update(); id, role and password_hash are not.
UPDATABLE_FIELDS = frozenset({"name", "profile_image"})


class AccountStore(Protocol):
    """Persistence contract used by the account service."""

    def find_by_email_or_phone(self, identifier: str) -> Account | None: ...

    def find_by_id(self, account_id: str) -> Account | None: ...

    def insert(self, account: Account) -> str: ...

    def update(self, account_id: str, fields: dict[str, Any]) -> Account: ...

    def delete(self, account_id: str) -> bool: ...

    def list_all(self) -> list[Account]: ...


class SqlAccountStore:
    """
    AccountStore backed by a SQLAlchemy session.

    Uniqueness of email and phone is enforced by the database's unique indexes,
    so concurrent signups race on the insert itself and the loser gets ConflictError.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_email_or_phone(self, identifier: str) -> Account | None:
        if not identifier:
            return None
        try:
            return (
                self.session.query(Account)
                .filter(or_(Account.email == identifier, Account.phone == identifier))
                .first()
            )
        except SQLAlchemyError as e:
            raise self._internal("find_by_email_or_phone", e) from e

    def find_by_id(self, account_id: str) -> Account | None:
        try:
            return self.session.get(Account, account_id)
        except SQLAlchemyError as e:
            raise self._internal("find_by_id", e) from e

    def insert(self, account: Account) -> str:
        """Persist a new account and return its id. Raises ConflictError on a duplicate email/phone."""
        try:
            self.session.add(account)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info("Insert rejected by unique constraint: %s", type(e.orig).__name__)
            raise ConflictError() from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise self._internal("insert", e) from e
        self.session.refresh(account)
        return account.id

    def update(self, account_id: str, fields: dict[str, Any]) -> Account:
        """Apply fields to the account (last writer wins). Raises NotFoundError if it is gone."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {', '.join(sorted(unknown))}")
        account = self.find_by_id(account_id)
        if account is None:
            raise NotFoundError()
        try:
            for key, value in fields.items():
                setattr(account, key, value)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise self._internal("update", e) from e
        self.session.refresh(account)
        return account

    def delete(self, account_id: str) -> bool:
        """Delete by id; False when no row was removed (already gone or never existed)."""
        try:
            deleted = (
                self.session.query(Account)
                .filter(Account.id == account_id)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise self._internal("delete", e) from e
        return deleted > 0

    def list_all(self) -> list[Account]:
        try:
            return self.session.query(Account).order_by(Account.created_at, Account.id).all()
        except SQLAlchemyError as e:
            raise self._internal("list_all", e) from e

    @staticmethod
    def _internal(operation: str, exc: Exception) -> InternalError:
        logger.exception("Account store %s failed: %s", operation, exc)
        return InternalError()
