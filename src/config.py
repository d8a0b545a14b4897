"""Pydantic Settings — loads configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    redis_url: str = "redis://localhost:6379"
    report_ttl_seconds: int = 3600

    fetcher_provider: Literal["direct", "firecrawl"] = "direct"
    fetch_timeout_seconds: float = 30.0
    fetch_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )
    firecrawl_api_key: str = ""
    firecrawl_api_url: str = ""

    max_pages: int = 10

    mail_api_url: str = "https://api.resend.com/emails"
    mail_api_key: str = ""
    mail_from: str = ""
    mail_timeout_seconds: float = 10.0

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
