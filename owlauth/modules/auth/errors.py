"""Exceptions raised by the authentication module."""

from .models import AuthErrorCode


class AuthError(Exception):
    """Base class for owlauth errors."""

    code: AuthErrorCode = AuthErrorCode.VALIDATION_FAILED


class RevalidationFailed(AuthError):
    """The held credential could not be re-validated to recover the user id."""

    code = AuthErrorCode.REVALIDATION_FAILED

    def __init__(self, message: str = "Failed to validate API key"):
        super().__init__(message)
        self.message = message


class IdentityPayloadError(AuthError):
    """The identity endpoint answered 2xx with a body lacking a user id."""
