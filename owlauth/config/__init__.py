"""Configuration for owlauth."""

from .provider import AuthConfig, ConfigProvider, EnvConfigProvider, StorageConfig

__all__ = ["AuthConfig", "ConfigProvider", "EnvConfigProvider", "StorageConfig"]
