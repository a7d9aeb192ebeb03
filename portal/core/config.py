"""Human-friendly configuration loader.

The ``AppSettings`` class centralises every environment variable the portal
relies on. That means anyone inspecting the project can quickly answer:

*What:* Which settings exist and what do they control?
*When:* They are read once at startup (``get_settings`` caches the result).
*Why:* One place for configuration instead of magic strings in every router.
*How:* ``pydantic-settings`` reads the process environment plus optional
``.env``/``.env.local`` files and validates the types for us.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent
BASE_DIR = PACKAGE_DIR.parent


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Movie Portal"

    # Folders. ``TEMPLATES_DIR``/``STATIC_DIR`` default to the copies shipped
    # inside the package; ``MOVIES_DIR`` holds the video files served at /movies.
    DATA_DIR: Path = Field(default_factory=lambda: BASE_DIR / "data")
    TEMPLATES_DIR: Path = Field(default_factory=lambda: PACKAGE_DIR / "templates")
    STATIC_DIR: Path = Field(default_factory=lambda: PACKAGE_DIR / "static")
    MOVIES_DIR: Path | None = None

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    DB_URL: str = Field(default="", validation_alias=AliasChoices("DATABASE_URL", "DB_URL"))
    DB_ECHO: bool = False

    # Server-side sessions: the cookie only carries an opaque token, the data
    # lives in the ``sessions`` table and expires after SESSION_MAX_AGE seconds
    # of inactivity.
    SESSION_COOKIE_NAME: str = "portal_session"
    SESSION_MAX_AGE: int = 60 * 10
    SESSION_HTTPS_ONLY: bool = False

    BCRYPT_ROUNDS: int = 10

    MAIL_BACKEND: Literal["smtp", "console"] = "smtp"
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_STARTTLS: bool = True
    SMTP_TIMEOUT: float = 10.0
    SMTP_USERNAME: str = Field(default="", validation_alias=AliasChoices("SMTP_USERNAME", "EMAIL_USER"))
    SMTP_PASSWORD: str = Field(default="", validation_alias=AliasChoices("SMTP_PASSWORD", "EMAIL_PASS"))
    MAIL_FROM: str = ""
    CONTACT_RECIPIENT: str = ""

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    METRICS_ENABLED: bool = True

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def check_bcrypt_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return value

    @field_validator("SESSION_MAX_AGE")
    @classmethod
    def check_session_max_age(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("SESSION_MAX_AGE must be a positive number of seconds")
        return value

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite+aiosqlite:///{self.DATA_DIR / 'portal.db'}"

    @property
    def movies_dir(self) -> Path:
        return self.MOVIES_DIR if self.MOVIES_DIR is not None else self.DATA_DIR / "movies"

    @property
    def mail_sender(self) -> str:
        return self.MAIL_FROM or self.SMTP_USERNAME

    @property
    def contact_recipient(self) -> str:
        return self.CONTACT_RECIPIENT or self.SMTP_USERNAME


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    return settings
