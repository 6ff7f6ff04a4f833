"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

DEFAULT_API_BASE_URL = "https://api.openworldlabs.ai"
DEFAULT_USER_INFO_PATH = "/api/v1/user/info"
STORAGE_BACKENDS = ("memory", "file", "redis")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


@dataclass
class AuthConfig:
    """Authentication configuration."""
    api_base_url: str = DEFAULT_API_BASE_URL
    user_info_path: str = DEFAULT_USER_INFO_PATH
    bypass_auth: bool = False
    credential_prefix: str = "sk_"
    request_timeout: float = 10.0

    @property
    def user_info_url(self) -> str:
        """Full URL of the identity endpoint."""
        return self.api_base_url.rstrip("/") + self.user_info_path


@dataclass
class StorageConfig:
    """Credential storage configuration."""
    backend: str = "file"
    file_path: Optional[Path] = None
    redis_url: str = "redis://localhost:6379/0"
    redis_key: str = "owl:credentials"


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration."""
        ...

    def get_storage_config(self) -> StorageConfig:
        """Get credential storage configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration from environment variables."""
        timeout_env = os.getenv("OWL_REQUEST_TIMEOUT", "10")
        try:
            timeout = float(timeout_env)
        except ValueError:
            raise ValueError(
                f"OWL_REQUEST_TIMEOUT must be a number of seconds, got {timeout_env!r}"
            )

        # Either host flag pre-satisfies auth for embedded settings windows
        bypass = _env_flag("OWL_SKIP_AUTH") or _env_flag("OWL_DIRECT_SETTINGS")

        return AuthConfig(
            api_base_url=os.getenv("OWL_API_BASE_URL", DEFAULT_API_BASE_URL),
            user_info_path=os.getenv("OWL_USER_INFO_PATH", DEFAULT_USER_INFO_PATH),
            bypass_auth=bypass,
            credential_prefix=os.getenv("OWL_CREDENTIAL_PREFIX", "sk_"),
            request_timeout=timeout,
        )

    def get_storage_config(self) -> StorageConfig:
        """Get credential storage configuration from environment variables."""
        backend = os.getenv("OWL_STORAGE_BACKEND", "file").lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"OWL_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, "
                f"got {backend!r}"
            )

        file_env = os.getenv("OWL_CREDENTIALS_FILE")
        file_path = (
            Path(file_env).expanduser()
            if file_env
            else Path.home() / ".owl-control" / "credentials.json"
        )

        return StorageConfig(
            backend=backend,
            file_path=file_path,
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            redis_key=os.getenv("OWL_REDIS_KEY", "owl:credentials"),
        )
