import os
from dataclasses import dataclass
from dotenv import load_dotenv
load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    return int(raw) if raw.strip().lstrip("-").isdigit() else default


@dataclass(frozen=True)
class Settings:
    ENV: str = os.getenv("ENV", "prod")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./practice_builder.db")
    REDIS_URL: str = os.getenv("REDIS_URL", "")
    TZ: str = os.getenv("TZ", "UTC")
    DEFAULT_PLAN_TITLE: str = os.getenv("DEFAULT_PLAN_TITLE", "New Practice Plan")
    LONG_SESSION_MINUTES: int = _int_env("LONG_SESSION_MINUTES", 120)


settings = Settings()
