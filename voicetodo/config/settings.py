"""
Global settings from environment variables.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VoiceTodoSettings(BaseSettings):
    """
    Global configuration loaded from environment variables.

    Environment variables should be prefixed with VOICETODO_
    Example: VOICETODO_DEBUG=true, VOICETODO_PERMISSION_STORE_TYPE=sqlite
    """

    model_config = SettingsConfigDict(
        env_prefix="VOICETODO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    # Core settings
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False
    log_file: str | None = None  # Also write log entries to this path

    # Permission storage
    permission_store_type: Literal["memory", "sqlite", "mongodb"] = "sqlite"
    sqlite_db_path: str = "~/.voicetodo/voicetodo.db"
    mongo_uri: str | None = None
    mongo_db_name: str = "voicetodo"

    # Tool execution
    tool_max_retries: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=1.0, ge=0.0)  # seconds, doubled per retry
    retry_max_delay: float = Field(default=60.0, ge=0.0)


# Global settings instance (singleton)
settings = VoiceTodoSettings()


__all__ = ["VoiceTodoSettings", "settings"]
