# app/core/config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives at the repository root, next to pyproject.toml
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(ENV_FILE, override=False)

_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    # ---- App ----
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # ---- Outbound requests ----
    MARKET_NEWS_USER_AGENT: str = _BROWSER_USER_AGENT
    # SEC asks automated clients to identify themselves with a contact address.
    SEC_EDGAR_USER_AGENT: str = "AlphaPulse contact@example.com"

    # Upper bound per adapter invocation. Unset means no bound: a hung
    # upstream then stalls the whole request.
    MARKET_NEWS_SOURCE_TIMEOUT_S: Optional[float] = Field(default=None, gt=0)

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
