"""SQLAlchemy ORM models."""

from accountkit.models.account import Account, Role
from accountkit.models.base import Base

__all__ = ["Account", "Base", "Role"]
