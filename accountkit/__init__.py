"""Account and identity service: signup, login, session tokens and owner/admin access control."""

__version__ = "0.1.0"
