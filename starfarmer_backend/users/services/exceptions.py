# users/services/exceptions.py


class AccountError(Exception):
    """Base exception for account flows."""


class InvalidTokenError(AccountError):
    """Raised when a verification or password-reset token is invalid or expired."""


class AccountNotFoundError(AccountError):
    """Raised when no account matches the given email."""


class AlreadyVerifiedError(AccountError):
    """Raised when verification is requested for a verified account."""
