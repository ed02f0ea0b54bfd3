"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SpeechPad settings loaded from environment / .env file.

    Every field can be overridden with a ``SPEECHPAD_``-prefixed environment
    variable (case-insensitive), e.g. ``SPEECHPAD_ASSEMBLYAI_API_KEY``.
    Credentials are opaque: they are only checked for presence when the
    provider or store that needs them is constructed.

    Attributes:
        transport: Client-side encoding of audio ("base64" or "multipart").
        transcription_strategy: Server-side submission shape ("direct" sends
            raw bytes to the provider, "object_store" uploads to a bucket and
            submits the public URL).
        database_url: Async SQLAlchemy connection string for the row store.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPEECHPAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:8501",  # Streamlit
        "http://localhost:5173",  # Vite dev frontend
        "http://localhost:3000",
    ]

    # --- Client ---
    backend_base_url: str = "http://localhost:8000"
    request_timeout: float = 300.0  # transcription round trip includes provider polling
    transport: str = "base64"

    # --- Transcription ---
    transcription_strategy: str = "direct"
    transcription_provider: str = "assemblyai"
    assemblyai_api_key: str = ""
    assemblyai_base_url: str = "https://api.assemblyai.com"
    default_language: str = "en"  # ISO 639-1; empty string lets the provider detect
    poll_interval: float = 3.0  # seconds between job status checks
    transcription_timeout: float = 300.0  # bounded wait for a terminal job state
    max_upload_mb: int = 10

    # --- Storage ---
    uploads_dir: str = "data/uploads"  # disk buffer used by the "direct" strategy
    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_bucket: str = "audio"
    database_url: str = "sqlite+aiosqlite:///data/speechpad.db"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the API server and terminal scripts."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
