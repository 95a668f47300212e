"""
Configuration management for template_eval.

Uses pydantic-settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from template_eval.constants import MAX_SERIALIZED_TOKENS


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Paths are optional here so that library use does not require a .env file;
    the getters below raise when a script needs a path that was never set.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars
    )

    # Inputs
    answer_key_path: Path | None = Field(
        default=None,
        description="MUC answer key file (gold templates)",
    )
    cluster_log_path: Path | None = Field(
        default=None,
        description="Run log with cluster guesses per story",
    )
    topic_log_path: Path | None = Field(
        default=None,
        description="Run log with topic guesses per story (interpolation only)",
    )

    # Outputs
    log_dir: Path = Field(
        default=Path("logs"),
        description="Directory for log files",
    )
    report_csv_path: Path | None = Field(
        default=None,
        description="Optional CSV file for gauntlet report rows",
    )

    # Behaviour
    max_serialized_tokens: int = Field(
        default=MAX_SERIALIZED_TOKENS,
        ge=1,
        description="Token pairs written per cluster record",
    )
    gauntlet_workers: int = Field(
        default=1,
        ge=1,
        description="Grid points evaluated concurrently",
    )

    @field_validator(
        "answer_key_path", "cluster_log_path", "topic_log_path", "report_csv_path", mode="before"
    )
    @classmethod
    def empty_string_to_none(cls, v: str | Path | None) -> str | Path | None:
        """Convert empty strings to None for optional paths."""
        if isinstance(v, str):
            v = v.strip()
            return v if v else None
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def get_answer_key_path() -> Path:
    """Get the answer key path from settings."""
    path = get_settings().answer_key_path
    if path is None:
        raise ValueError("ANSWER_KEY_PATH not set in .env file")
    return path


def get_cluster_log_path() -> Path:
    """Get the cluster run log path from settings."""
    path = get_settings().cluster_log_path
    if path is None:
        raise ValueError("CLUSTER_LOG_PATH not set in .env file")
    return path


def get_topic_log_path() -> Path | None:
    """Get the topic run log path from settings (optional)."""
    return get_settings().topic_log_path


def get_log_dir() -> Path:
    """Get the log directory from settings."""
    return get_settings().log_dir
