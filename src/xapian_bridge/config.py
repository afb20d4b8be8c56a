"""Centralized configuration for xapian-bridge using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from xapian_bridge.stemmer import Stemmer


if TYPE_CHECKING:
    from xapian_bridge.database import DatabaseAction


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``XAPIAN_BRIDGE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="XAPIAN_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Native library
    library_path: str | None = Field(
        default=None,
        min_length=1,
        description="Path or soname of a prebuilt cx_* shim; the bundled shim is used when unset",
    )
    build_library: bool = Field(
        default=True, description="Compile the bundled shim on first use when it has not been built"
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Indexing
    default_stemmer: str | None = Field(
        default=None,
        description="Stemmer applied by index_text when none is given (e.g. 'english', 'porter')",
    )

    # Databases and search
    writable_action: Literal["create_or_open", "create", "create_or_overwrite", "open"] = Field(
        default="create_or_open", description="How writable databases are opened"
    )
    default_result_limit: int = Field(default=10, ge=1, description="Default number of matches per result set")

    @field_validator("default_stemmer")
    @classmethod
    def _check_stemmer(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        # Raises ValueError listing the available stemmers
        Stemmer.from_name(value)
        return value.strip()

    def get_default_stemmer(self) -> Stemmer | None:
        """Return the configured default stemmer, if any."""
        if self.default_stemmer is None:
            return None
        return Stemmer.from_name(self.default_stemmer)

    def get_writable_action(self) -> DatabaseAction:
        """Return the configured open action as a ``DatabaseAction``."""
        from xapian_bridge.database import DatabaseAction

        return DatabaseAction[self.writable_action.upper()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings so the environment is read again."""
    get_settings.cache_clear()
