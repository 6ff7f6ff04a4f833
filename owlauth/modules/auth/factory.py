"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the storage backend and identity validator from configuration
- Wires dependencies together
- Returns a loaded AuthStateManager
"""

import logging
from typing import Optional

from ...config.provider import AuthConfig, ConfigProvider, StorageConfig
from ..storage import FileCredentialStore, MemoryCredentialStore, RedisCredentialStore
from .interfaces import CredentialStore, IdentityValidator
from .manager import AuthStateManager
from .validator import HttpIdentityValidator

logger = logging.getLogger(__name__)


class AuthFactory:
    """
    Factory for building the authentication stack.

    This is the composition root that:
    - Creates the storage and validation ports
    - Injects them into the state manager
    - Restores persisted state before handing the manager out
    """

    @staticmethod
    def build_storage(storage_config: StorageConfig) -> CredentialStore:
        """
        Create the credential store selected by configuration.

        Args:
            storage_config: Storage configuration

        Returns:
            CredentialStore implementation
        """
        if storage_config.backend == "redis":
            logger.info(f"Using Redis credential store ({storage_config.redis_key})")
            return RedisCredentialStore.from_url(
                storage_config.redis_url, key=storage_config.redis_key
            )

        if storage_config.backend == "memory":
            logger.info("Using in-memory credential store; nothing survives a restart")
            return MemoryCredentialStore()

        if storage_config.file_path is None:
            raise ValueError("File credential store requires file_path")
        logger.info(f"Using file credential store at {storage_config.file_path}")
        return FileCredentialStore(storage_config.file_path)

    @staticmethod
    async def build(
        config_provider: ConfigProvider,
        storage: Optional[CredentialStore] = None,
        validator: Optional[IdentityValidator] = None,
    ) -> AuthStateManager:
        """
        Build the complete authentication stack.

        Args:
            config_provider: Configuration provider
            storage: Optional store overriding the configured backend
            validator: Optional validator overriding the HTTP one

        Returns:
            AuthStateManager with stored state restored
        """
        auth_config = config_provider.get_auth_config()

        if storage is None:
            storage = AuthFactory.build_storage(config_provider.get_storage_config())

        if validator is None:
            validator = HttpIdentityValidator.from_config(auth_config)

        if auth_config.bypass_auth:
            logger.warning("Authentication bypass enabled by host configuration")

        return await AuthStateManager.create(
            storage,
            validator,
            bypass_auth=auth_config.bypass_auth,
            credential_prefix=auth_config.credential_prefix,
        )

    @staticmethod
    async def build_for_testing(
        storage: Optional[CredentialStore] = None,
        validator: Optional[IdentityValidator] = None,
        bypass_auth: bool = False,
    ) -> AuthStateManager:
        """
        Build a manager for testing with in-memory defaults.

        Args:
            storage: Mock or in-memory store
            validator: Mock validator; defaults to the HTTP validator for the default endpoint

        Returns:
            AuthStateManager for testing
        """
        if storage is None:
            storage = MemoryCredentialStore()

        if validator is None:
            validator = HttpIdentityValidator.from_config(AuthConfig())

        return await AuthStateManager.create(storage, validator, bypass_auth=bypass_auth)
