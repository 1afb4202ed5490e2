"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent
SUPPORTED_LANGUAGES = ("en", "sl", "hr")


class Settings:
    ENV: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRE_HOURS: int
    DATABASE_URL: str
    LOG_LEVEL: str
    ALLOW_INSECURE_JWT: bool
    ALLOW_DEV_CORS: bool
    DEFAULT_LANGUAGE: str
    SUBMIT_RATE_LIMIT_PER_MIN: int
    SUBMIT_RATE_LIMIT_WINDOW_SECONDS: int
    RATE_LIMIT_MAX_KEYS: int
    ADMIN_USERNAMES: frozenset

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change_me_for_prod")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "24"))
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'app.db'}")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_INSECURE_JWT = os.getenv("ALLOW_INSECURE_JWT", "false").lower() == "true"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en").lower()
        self.SUBMIT_RATE_LIMIT_PER_MIN = int(os.getenv("SUBMIT_RATE_LIMIT_PER_MIN", "30"))
        self.SUBMIT_RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("SUBMIT_RATE_LIMIT_WINDOW_SECONDS", "60"))
        self.RATE_LIMIT_MAX_KEYS = int(os.getenv("RATE_LIMIT_MAX_KEYS", "10000"))
        self.ADMIN_USERNAMES = frozenset(
            name.strip() for name in os.getenv("ADMIN_USERNAMES", "").split(",") if name.strip()
        )
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == "change_me_for_prod":
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")
        if self.DEFAULT_LANGUAGE not in SUPPORTED_LANGUAGES:
            raise RuntimeError(f"DEFAULT_LANGUAGE must be one of {', '.join(SUPPORTED_LANGUAGES)}")


settings = Settings()
