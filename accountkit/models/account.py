"""ORM model for accounts (credentials, profile and role)."""

import enum
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, String, func

from accountkit.models.base import Base


class Role(str, enum.Enum):
    """Authorization level of an account."""

    USER = "User"
    ADMIN = "Admin"


def _new_account_id() -> str:
    return str(uuid.uuid4())


class Account(Base):
    """
    A person able to authenticate.

    email and phone are each unique when present; at least one is set at creation.
    role is 'User' or 'Admin' and does not change after creation.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("role IN ('User', 'Admin')", name="ck_accounts_role"),
        CheckConstraint(
            "email IS NOT NULL OR phone IS NOT NULL",
            name="ck_accounts_email_or_phone",
        ),
    )

    id = Column(String(36), primary_key=True, default=_new_account_id)
    email = Column(String(320), nullable=True, unique=True, index=True)
    phone = Column(String(32), nullable=True, unique=True, index=True)
    name = Column(String(255), nullable=False, default="")
    profile_image = Column(String(2048), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default=Role.USER.value)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} role={self.role}>"
