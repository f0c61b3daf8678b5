"""Configuration management using Pydantic Settings.

Settings are loaded from environment variables and an optional ``.env`` file.
The configuration is organized into logical groups:
- LoggingConfig: Logging levels, files, and debugging options
- CredentialsConfig: Spotify and Last.fm credentials
- APIConfig: Catalog and engagement service tuning (market, retries, concurrency)
- GeneratorConfig: Defaults for the playlist generator
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("spotgen.log")
    real_time_debug: bool = True


class CredentialsConfig(BaseModel):
    """API credentials and authentication settings."""

    # Spotify client credentials flow
    spotify_client_id: str = ""
    spotify_client_secret: str = ""

    # Last.fm credentials
    lastfm_key: str = ""
    lastfm_secret: str = ""
    lastfm_username: str = ""


class APIConfig(BaseModel):
    """External API configuration and retry policy."""

    # Spotify Web API
    spotify_market: str = "US"
    spotify_search_limit: int = 50
    spotify_page_limit: int = 50
    spotify_concurrency: int = 5
    spotify_retry_count: int = 5
    spotify_retry_interval: float = 0.1

    # Last.fm API
    lastfm_retry_count: int = 3
    lastfm_retry_interval: float = 1.0


class GeneratorConfig(BaseModel):
    """Playlist generator defaults."""

    default_format: str = "uri"
    similar_artist_limit: int = 20
    similar_track_limit: int = 5
    unique: bool = True


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: SPOTIFY_CLIENT_ID, LASTFM_KEY, CONSOLE_LOG_LEVEL
    - Nested: CREDENTIALS__SPOTIFY_CLIENT_ID, API__SPOTIFY_MARKET
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = LoggingConfig()
    credentials: CredentialsConfig = CredentialsConfig()
    api: APIConfig = APIConfig()
    generator: GeneratorConfig = GeneratorConfig()

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Map flat environment variables onto the nested groups."""
        if not isinstance(data, dict):
            return data

        transformed: dict[str, dict[str, Any]] = {}

        log_mapping = {
            "console_log_level": "console_level",
            "file_log_level": "file_level",
            "log_file": "log_file",
            "log_real_time_debug": "real_time_debug",
        }
        for env_key, field_key in log_mapping.items():
            if env_key in data:
                transformed.setdefault("logging", {})[field_key] = data.pop(env_key)

        cred_mapping = {
            "spotify_client_id": "spotify_client_id",
            "spotify_client_secret": "spotify_client_secret",
            "lastfm_key": "lastfm_key",
            "lastfm_secret": "lastfm_secret",
            "lastfm_username": "lastfm_username",
        }
        for env_key, field_key in cred_mapping.items():
            if env_key in data:
                transformed.setdefault("credentials", {})[field_key] = data.pop(
                    env_key
                )

        for group, values in transformed.items():
            existing = data.get(group)
            if isinstance(existing, dict):
                values = {**existing, **values}
            data[group] = values

        return data


# Singleton instance for application use
settings = Settings()
