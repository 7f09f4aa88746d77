"""Configuration settings for the user accounts service."""

import os
import secrets
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class JWTConfig:
    """Signing parameters handed to the session issuer."""

    secret_key: str
    algorithm: str
    expire_minutes: int


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./user_accounts.db")

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", "60"))

    # Passwords
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))
    PASSWORD_RESET_EXPIRE_MINUTES: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "10"))

    # Mail
    MAIL_BACKEND: str = os.getenv("MAIL_BACKEND", "console")  # console, smtp
    MAIL_FROM: str = os.getenv("MAIL_FROM", "no-reply@localhost")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "25"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "false").lower() == "true"

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        self._generated_secret = not self.JWT_SECRET_KEY
        if self._generated_secret:
            self.JWT_SECRET_KEY = secrets.token_urlsafe(32)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    def jwt_config(self) -> JWTConfig:
        """Build the signing config for the session issuer."""
        return JWTConfig(
            secret_key=self.JWT_SECRET_KEY,
            algorithm=self.JWT_ALGORITHM,
            expire_minutes=self.JWT_EXPIRE_MINUTES,
        )

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self._generated_secret:
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if self.is_production and self.MAIL_BACKEND == "console":
            errors.append("MAIL_BACKEND is 'console' in production - reset links will not be delivered")
        if self.MAIL_BACKEND not in ("console", "smtp"):
            errors.append(f"Unknown MAIL_BACKEND '{self.MAIL_BACKEND}' - falling back to console")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
