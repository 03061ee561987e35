"""Password hashing and session token issuing/verification."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from accountkit.core.config import get_settings
from accountkit.core.errors import (
    ExpiredTokenError,
    HashingError,
    InvalidSignatureError,
    MalformedTokenError,
)
from accountkit.models.account import Role
from accountkit.schemas.auth import Caller

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72

REQUIRED_CLAIMS = ("sub", "role", "exp", "iat")


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """One-way salted bcrypt hashing with a fixed cost factor."""

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds
        # Built up front so the first unknown-identifier login costs the same as later ones.
        self._dummy_hash = self.hash("accountkit-timing-equalizer")

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Raises HashingError if bcrypt fails."""
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")
        except (MemoryError, ValueError) as e:
            raise HashingError() from e

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash; False on any mismatch or bad hash."""
        try:
            return bcrypt.checkpw(_password_bytes(plain_password), hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False

    def burn(self, plain_password: str) -> None:
        """Run a verify against a throwaway hash so unknown identifiers cost as much as known ones."""
        self.verify(plain_password, self._dummy_hash)


class TokenIssuer:
    """Signs and verifies stateless session tokens carrying account id and role."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ) -> None:
        if not secret or not secret.strip():
            raise ValueError("Token signing secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, account_id: str, role: Role | str) -> str:
        """Create a JWT with sub (account id), role, iat and exp."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(account_id),
            "role": Role(role).value,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Caller:
        """
        Check signature and expiry; return the caller identity encoded in the token.

        Raises ExpiredTokenError, InvalidSignatureError or MalformedTokenError.
        """
        if not token or not token.strip():
            raise MalformedTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError() from e
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError() from e
        except jwt.PyJWTError as e:
            raise MalformedTokenError() from e

        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            raise MalformedTokenError("Invalid token payload.")
        try:
            role = Role(payload.get("role"))
        except ValueError as e:
            raise MalformedTokenError("Invalid token payload.") from e
        return Caller(account_id=sub, role=role)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Process-wide hasher configured from settings."""
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Process-wide token issuer; the secret is read from settings once."""
    settings = get_settings()
    return TokenIssuer(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_EXPIRE_MINUTES,
    )
