"""
Centralized configuration management

All configuration values are read from environment variables,
with sensible defaults for development.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # --- FastAPI ---
    app_host: str = "0.0.0.0"
    port: int = 7680
    log_level: str = "info"

    # --- Browser (brat) ---
    chrome_bin: Optional[str] = None  # None = Playwright's bundled Chromium
    brat_url: str = "https://www.bratgenerator.com/"

    # --- Upload host ---
    upload_url: str = "https://tmpfiles.org/api/v1/upload"
    http_timeout: float = 300.0  # upload + audio download, seconds

    # --- yt-dlp ---
    ytdlp_proxy: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance (singleton)."""
    return Settings()
