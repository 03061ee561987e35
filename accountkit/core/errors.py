"""Domain error taxonomy shared by the account service, its stores and the API layer."""


class AccountError(Exception):
    """Base class for expected account/auth failures; carries an HTTP-equivalent status."""

    status_code = 500
    code = "account_error"
    default_message = "Account operation failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AccountError):
    """Malformed or missing input (user-correctable)."""

    status_code = 400
    code = "validation_error"
    default_message = "Invalid input."


class ConflictError(AccountError):
    """A unique field (email or phone) is already in use."""

    status_code = 409
    code = "conflict"
    default_message = "Account already exists."


class InvalidCredentialsError(AccountError):
    """Login failed. One message for unknown identifier and wrong password."""

    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials."


class NotAuthenticatedError(AccountError):
    status_code = 401
    code = "not_authenticated"
    default_message = "Not authenticated."


class TokenError(NotAuthenticatedError):
    """Session token could not be verified."""

    code = "invalid_token"
    default_message = "Invalid token."


class ExpiredTokenError(TokenError):
    """Token signature is valid but it is past its expiry; the caller should log in again."""

    code = "token_expired"
    default_message = "Token expired."


class InvalidSignatureError(TokenError):
    code = "invalid_signature"
    default_message = "Invalid token signature."


class MalformedTokenError(TokenError):
    code = "malformed_token"
    default_message = "Malformed token."


class ForbiddenError(AccountError):
    status_code = 403
    code = "forbidden"
    default_message = "Not allowed to access this account."


class NotFoundError(AccountError):
    status_code = 404
    code = "not_found"
    default_message = "Account not found."


class InternalError(AccountError):
    """Storage, hashing or signing failure. The message never carries collaborator detail."""

    status_code = 500
    code = "internal_error"
    default_message = "Internal Server Error"


class HashingError(InternalError):
    """The password hasher could not produce a hash (resource exhaustion or library failure)."""

    code = "hashing_error"
