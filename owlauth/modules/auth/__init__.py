"""
Authentication Module - Black Box Interface

Purpose: Track API key validity and user consent for the desktop client
Interface: validate_credential(), record_consent(), is_authenticated(),
           has_credential(), get_user_info(), revalidate(), logout()
Hidden: Storage keys, consent parsing, identity endpoint protocol

The storage backend and identity validator are injected, so either can be
replaced without affecting callers.
"""

from .errors import AuthError, IdentityPayloadError, RevalidationFailed
from .factory import AuthFactory
from .manager import AuthStateManager
from .models import AuthErrorCode, AuthState, UserInfo, ValidationResult, redact_credential
from .validator import HttpIdentityValidator

__all__ = [
    "AuthError",
    "AuthErrorCode",
    "AuthFactory",
    "AuthState",
    "AuthStateManager",
    "HttpIdentityValidator",
    "IdentityPayloadError",
    "RevalidationFailed",
    "UserInfo",
    "ValidationResult",
    "redact_credential",
]
