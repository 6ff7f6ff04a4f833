"""
Authentication data models.

These models define the results handed back to callers of the
authentication state manager and the payload returned by the
identity endpoint.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

REDACTED_VISIBLE_CHARS = 10
AUTH_METHOD = "apiKey"


class AuthState(str, Enum):
    """Externally observable authentication state."""

    UNAUTHENTICATED = "unauthenticated"
    HAS_CREDENTIAL_NO_CONSENT = "has_credential_no_consent"
    AUTHENTICATED = "authenticated"


class AuthErrorCode(str, Enum):
    """Why an authentication operation did not succeed."""

    EMPTY_CREDENTIAL = "empty_credential"
    MALFORMED_CREDENTIAL = "malformed_credential"
    VALIDATION_FAILED = "validation_failed"
    REVALIDATION_FAILED = "revalidation_failed"
    STORAGE_UNAVAILABLE = "storage_unavailable"


def redact_credential(credential: str, visible: int = REDACTED_VISIBLE_CHARS) -> str:
    """Return the first characters of a credential followed by an ellipsis."""
    return credential[:visible] + "..."


class ValidationResult(BaseModel):
    """Tagged result of a credential validation attempt."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    user_id: Optional[str] = Field(None, alias="userId")
    message: Optional[str] = None
    error: Optional[AuthErrorCode] = None
    persisted: bool = Field(
        default=False, description="Whether the accepted credential reached storage"
    )

    @classmethod
    def ok(cls, user_id: str, persisted: bool = True) -> "ValidationResult":
        return cls(success=True, user_id=user_id, persisted=persisted)

    @classmethod
    def fail(cls, error: AuthErrorCode, message: str) -> "ValidationResult":
        return cls(success=False, error=error, message=message)

    def to_dict(self) -> dict:
        """Caller-facing dict: {success, userId} or {success, message}."""
        if self.success:
            return {"success": True, "userId": self.user_id}
        return {"success": False, "message": self.message}


class UserInfo(BaseModel):
    """Redacted summary of the current authentication state."""

    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool
    has_api_key: Optional[bool] = Field(None, alias="hasApiKey")
    has_consented: Optional[bool] = Field(None, alias="hasConsented")
    method: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey", description="Redacted credential")
    user_id: Optional[str] = Field(None, alias="userId")
    needs_revalidation: bool = Field(False, alias="needsRevalidation")

    @classmethod
    def anonymous(cls) -> "UserInfo":
        return cls(authenticated=False)

    def to_dict(self) -> dict:
        """Dump with camelCase keys, leaving out fields that were never set."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if not self.needs_revalidation:
            data.pop("needsRevalidation")
        return data


class UserInfoPayload(BaseModel):
    """Body returned by the identity endpoint on success."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., alias="userId", min_length=1)
