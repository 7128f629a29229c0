"""Configuration models."""

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class StorageConfig(BaseModel):
    """Layout of the data directory."""

    data_dir: str = Field("data", description="Root of the article store")
    index_file: str = Field("index.json", description="Index document name")
    current_dir: str = Field("current", description="Directory of the current month")
    current_file: str = Field("articles.json", description="Current month document name")
    archives_dir: str = Field("archives", description="Directory of archived months")
    legacy_file: str = Field("saved-articles.json", description="Pre-index single file store")

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def index_path(self) -> Path:
        return self.data_path / self.index_file

    @property
    def current_path(self) -> Path:
        return self.data_path / self.current_dir / self.current_file

    @property
    def archives_path(self) -> Path:
        return self.data_path / self.archives_dir

    @property
    def legacy_path(self) -> Path:
        return self.data_path / self.legacy_file


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level name")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Accept standard level names in any case."""
        name = v.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {v}")
        return name


class ConfigModel(BaseModel):
    """Main configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
