"""
Authentication state manager for the desktop client.

This module holds the in-memory API key, user id and consent flag and
exposes the state machine the rest of the application queries before
unlocking protected features. Durable copies live behind a CredentialStore;
the identity check goes through an IdentityValidator. Both are injected.
"""

import logging
from typing import Any, Optional

from ..storage import StorageUnavailable
from .errors import IdentityPayloadError, RevalidationFailed
from .interfaces import CredentialStore, IdentityValidator
from .models import (
    AUTH_METHOD,
    AuthErrorCode,
    AuthState,
    UserInfo,
    ValidationResult,
    redact_credential,
)

logger = logging.getLogger(__name__)

API_KEY_FIELD = "apiKey"
CONSENT_FIELD = "hasConsented"


def parse_consent(value: Any) -> bool:
    """Accept the canonical "true" string or a native boolean written by older builds."""
    return value is True or value == "true"


class AuthStateManager:
    """
    Credential and consent state machine.

    States:
        UNAUTHENTICATED           no API key held
        HAS_CREDENTIAL_NO_CONSENT API key held, consent not given
        AUTHENTICATED             API key held and consent given, or bypass set

    Overlapping calls are not serialized; the last writer wins.
    """

    def __init__(
        self,
        storage: CredentialStore,
        validator: IdentityValidator,
        bypass_auth: bool = False,
        credential_prefix: str = "sk_",
    ):
        """
        Initialize the manager. Call load() (or use create()) to restore state.

        Args:
            storage: Durable key-value store for the API key and consent flag
            validator: Remote identity check
            bypass_auth: Treat the user as authenticated regardless of state
            credential_prefix: Prefix every well-formed API key starts with
        """
        self.storage = storage
        self.validator = validator
        self.bypass_auth = bypass_auth
        self.credential_prefix = credential_prefix

        self._api_key: Optional[str] = None
        self._user_id: Optional[str] = None
        self._has_consented = False

        self.last_result: Optional[ValidationResult] = None
        self._checks_in_flight = 0

    @classmethod
    async def create(
        cls,
        storage: CredentialStore,
        validator: IdentityValidator,
        bypass_auth: bool = False,
        credential_prefix: str = "sk_",
    ) -> "AuthStateManager":
        """Build a manager and restore whatever the store holds."""
        manager = cls(storage, validator, bypass_auth, credential_prefix)
        await manager.load()
        return manager

    def __repr__(self) -> str:
        return (
            f"AuthStateManager(state={self.state.value}, "
            f"user_id={self._user_id!r}, bypass_auth={self.bypass_auth})"
        )

    async def load(self) -> None:
        """
        Restore the API key and consent flag from storage.

        Best-effort: any failure leaves the defaults in place. Consent is only
        restored alongside a stored API key.
        """
        try:
            result = await self.storage.load()
        except Exception as e:
            logger.warning(f"Could not load stored credentials: {e}")
            return

        if not result.success:
            logger.warning("Credential store reported an unsuccessful load")
            return

        api_key = result.data.get(API_KEY_FIELD)
        if api_key is not None and not isinstance(api_key, str):
            logger.warning(
                f"Ignoring stored API key of type {type(api_key).__name__}; treating as absent"
            )
            return

        if api_key:
            self._api_key = api_key
            self._has_consented = parse_consent(result.data.get(CONSENT_FIELD))
            logger.info(
                f"Restored stored API key {redact_credential(api_key)} "
                f"(consent={self._has_consented})"
            )

    # Queries

    def is_authenticated(self) -> bool:
        """True when bypassed, or when an API key is held and consent was given."""
        if self.bypass_auth:
            return True
        return bool(self._api_key) and self._has_consented

    def has_credential(self) -> bool:
        """True when an API key is held, regardless of consent."""
        return bool(self._api_key)

    @property
    def has_consented(self) -> bool:
        return self._has_consented

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def is_validating(self) -> bool:
        """True while any identity check is awaiting the endpoint."""
        return self._checks_in_flight > 0

    @property
    def state(self) -> AuthState:
        if self.is_authenticated():
            return AuthState.AUTHENTICATED
        if self.has_credential():
            return AuthState.HAS_CREDENTIAL_NO_CONSENT
        return AuthState.UNAUTHENTICATED

    def get_user_info(self) -> UserInfo:
        """
        Summarize the current state without touching the network.

        Returns:
            Anonymous info when no API key is held; a summary flagged
            needs_revalidation when the user id is unknown; otherwise the
            full redacted summary
        """
        if not self._api_key:
            return UserInfo.anonymous()

        return UserInfo(
            authenticated=self.is_authenticated(),
            has_api_key=self.has_credential(),
            has_consented=self._has_consented,
            method=AUTH_METHOD,
            api_key=redact_credential(self._api_key),
            user_id=self._user_id,
            needs_revalidation=self._user_id is None,
        )

    # Operations

    async def validate_credential(self, raw: Optional[str]) -> ValidationResult:
        """
        Check an API key against the identity endpoint and adopt it on success.

        Args:
            raw: API key as typed by the user

        Returns:
            ValidationResult; failures are returned, never raised
        """
        result = await self._check(raw)
        if result.success:
            self._api_key = raw
            self._user_id = result.user_id
            persisted = await self._save(API_KEY_FIELD, raw)
            result = ValidationResult.ok(result.user_id, persisted=persisted)

        self.last_result = result
        return result

    async def _check(self, raw: Optional[str]) -> ValidationResult:
        """Format checks plus one identity request; adopts and persists nothing."""
        if not raw or not raw.strip():
            return ValidationResult.fail(
                AuthErrorCode.EMPTY_CREDENTIAL, "API key cannot be empty"
            )

        if not raw.startswith(self.credential_prefix):
            return ValidationResult.fail(
                AuthErrorCode.MALFORMED_CREDENTIAL, "Invalid API key format"
            )

        self._checks_in_flight += 1
        try:
            response = await self.validator.fetch_identity(raw)
        except IdentityPayloadError as e:
            logger.warning(f"Identity endpoint sent an unusable response: {e}")
            return ValidationResult.fail(
                AuthErrorCode.VALIDATION_FAILED, "API key validation failed"
            )
        except Exception as e:
            logger.error(f"API key validation error: {e}")
            return ValidationResult.fail(
                AuthErrorCode.VALIDATION_FAILED, "API key validation failed"
            )
        finally:
            self._checks_in_flight -= 1

        if not response.ok:
            logger.info(f"API key {redact_credential(raw)} rejected ({response.status_code})")
            return ValidationResult.fail(
                AuthErrorCode.VALIDATION_FAILED,
                "Invalid API key, or server unavailable: " + response.status_text,
            )

        if not response.user_id:
            logger.error("Identity endpoint accepted the API key but sent no user id")
            return ValidationResult.fail(
                AuthErrorCode.VALIDATION_FAILED, "API key validation failed"
            )

        logger.info(f"API key {redact_credential(raw)} accepted for user {response.user_id}")
        return ValidationResult.ok(response.user_id, persisted=False)

    async def revalidate(self) -> str:
        """
        Re-check the held API key to recover the user id.

        Returns:
            User id reported by the identity endpoint

        Raises:
            RevalidationFailed: No API key held, or the check did not succeed
        """
        if not self._api_key:
            raise RevalidationFailed("No API key to validate")

        api_key = self._api_key
        result = await self._check(api_key)
        if not result.success:
            raise RevalidationFailed(f"Failed to validate API key: {result.message}")

        # The key may have been replaced or cleared while the check was in flight
        if self._api_key == api_key:
            self._user_id = result.user_id
        return result.user_id

    async def fetch_user_info(self) -> UserInfo:
        """
        Summarize the current state, revalidating first if the user id is unknown.

        Raises:
            RevalidationFailed: Revalidation was needed and did not succeed
        """
        if self._api_key and self._user_id is None:
            await self.revalidate()
        return self.get_user_info()

    async def record_consent(self, value: bool) -> bool:
        """
        Set and persist the consent flag.

        Returns:
            True if the flag reached storage
        """
        self._has_consented = bool(value)
        logger.info(f"Consent recorded: {self._has_consented}")
        return await self._save(CONSENT_FIELD, "true" if self._has_consented else "false")

    async def logout(self) -> bool:
        """
        Forget the API key, user id and consent, here and in storage.

        Returns:
            True if both cleared values reached storage
        """
        had_credential = self.has_credential()
        self._api_key = None
        self._user_id = None
        self._has_consented = False
        self.last_result = None

        key_saved = await self._save(API_KEY_FIELD, "")
        consent_saved = await self._save(CONSENT_FIELD, "false")
        if had_credential:
            logger.info("Logged out")
        return key_saved and consent_saved

    async def _save(self, key: str, value: str) -> bool:
        try:
            await self.storage.save(key, value)
        except StorageUnavailable as e:
            logger.error(f"Failed to persist {key}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error persisting {key}: {e}")
            return False
        return True
