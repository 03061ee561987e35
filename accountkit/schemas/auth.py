"""Request/response schemas for auth endpoints and the caller identity."""

from pydantic import BaseModel, Field, model_validator

from accountkit.models.account import Role


class Caller(BaseModel):
    """Verified identity extracted from a session token (account id and role)."""

    account_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class SignupRequest(BaseModel):
    """New user account. At least one of email or phone is required."""

    email: str | None = Field(default=None, max_length=320, description="Email address")
    phone: str | None = Field(default=None, max_length=32, description="Phone number")
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    password: str = Field(..., max_length=1024, description="Password")
    profile_image: str | None = Field(
        default=None, max_length=2048, description="Optional image path or URL"
    )


class SignupResponse(BaseModel):
    """Id of the created account."""

    id: str
    message: str = "User created successfully"


class AdminCreateRequest(BaseModel):
    """New admin account."""

    email: str = Field(..., min_length=1, max_length=320, description="Email address")
    password: str = Field(..., max_length=1024, description="Password")
    name: str = Field(default="", max_length=255, description="Display name")


class LoginRequest(BaseModel):
    """
    Credentials for login.

    Send the identifier as email_or_phone, or as separate email / phone fields.
    """

    email_or_phone: str | None = Field(default=None, max_length=320)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=32)
    password: str = Field(..., max_length=1024, description="Password")

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginRequest":
        if not self.identifier:
            raise ValueError("One of email_or_phone, email or phone is required")
        return self

    @property
    def identifier(self) -> str:
        for value in (self.email_or_phone, self.email, self.phone):
            if value and value.strip():
                return value.strip()
        return ""


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class CallerResponse(BaseModel):
    """Claims of the current token."""

    account_id: str
    role: Role
