import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    SECRET_KEY: str
    DATABASE_URL: str | None
    ASSESS_TYPE_LANG: str
    LOG_LEVEL: str


def get_settings() -> Settings:
    return Settings(
        SECRET_KEY=os.getenv("SECRET_KEY", "dev-insecure-key"),
        DATABASE_URL=os.getenv("DATABASE_URL"),
        ASSESS_TYPE_LANG=os.getenv("ASSESS_TYPE_LANG", "en").strip().lower() or "en",
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
