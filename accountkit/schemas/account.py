"""Account projections and profile update schemas. None of them carry the password hash."""

from datetime import datetime

from pydantic import BaseModel, Field

from accountkit.models.account import Role


class AccountOut(BaseModel):
    """Public view of an account."""

    id: str
    email: str | None = None
    phone: str | None = None
    name: str
    profile_image: str | None = None
    role: Role
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class AccountsListResponse(BaseModel):
    """Response for GET /accounts (admin only)."""

    accounts: list[AccountOut]


class AccountUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    profile_image: str | None = Field(default=None, max_length=2048)
