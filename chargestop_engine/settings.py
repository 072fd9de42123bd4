# chargestop_engine/settings.py

from __future__ import annotations
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHARGESTOP_",
        env_file=BASE_DIR.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Advies via OpenAI (zonder key valt /trip_advice terug op de concepttekst)
    advice_enabled: bool = True
    openai_model: str = "gpt-4.1"
    advice_max_tokens: int = 600
    advice_temperature: float = 0.3


@lru_cache
def get_settings() -> Settings:
    return Settings()
