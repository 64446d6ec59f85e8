"""Configuration management for school insights."""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from catalog import BUNDLED_CONFIG_DIR

DEFAULT_CONFIG_DIR = BUNDLED_CONFIG_DIR


class DataConfig(BaseSettings):
    """Locations of the taxonomy, issue catalog and export output."""

    model_config = SettingsConfigDict(
        env_prefix="SCHOOL_INSIGHTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    taxonomy_path: Path = Field(DEFAULT_CONFIG_DIR / "taxonomy.yaml")
    issue_catalog_path: Path = Field(DEFAULT_CONFIG_DIR / "issue_catalog.yaml")
    output_dir: Path = Field(Path("reports"))

    @field_validator("taxonomy_path", "issue_catalog_path")
    @classmethod
    def validate_yaml_path(cls, v):
        """Catalog files must be YAML."""
        if Path(v).suffix.lower() not in (".yaml", ".yml"):
            raise ValueError("Catalog paths must point to a .yaml or .yml file")
        return Path(v)


class AppConfig(BaseSettings):
    """Application configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="SCHOOL_INSIGHTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    name: str = Field("school-insights")
    version: str = Field("0.1.0")
    log_level: str = Field("INFO")
    debug: bool = Field(False)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure the level is one logging understands."""
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data: DataConfig = Field(default_factory=DataConfig)
    app: AppConfig = Field(default_factory=AppConfig)

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment."""
        return cls()


# Global settings instance
settings = Settings.load()
