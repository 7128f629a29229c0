"""Configuration management for the article store."""

from .loader import Config, load_config, save_config
from .models import ConfigModel, LoggingConfig, StorageConfig

__all__ = [
    "Config",
    "ConfigModel",
    "LoggingConfig",
    "StorageConfig",
    "load_config",
    "save_config",
]
