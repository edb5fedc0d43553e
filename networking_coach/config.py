"""
Application configuration management.

Loads settings from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from package directory
_PACKAGE_DIR = Path(__file__).parent
_PROJECT_ROOT = _PACKAGE_DIR.parent

# Try loading .env from multiple locations
for env_path in [_PACKAGE_DIR / ".env", _PROJECT_ROOT / ".env"]:
    if env_path.exists():
        load_dotenv(env_path)
        break

_DEV_SECRET_KEY = "dev-secret-key-change-in-production"


class Config:
    """Application configuration loaded from environment variables."""

    # ========================================
    # Paths
    # ========================================
    BASE_DIR: Path = _PACKAGE_DIR
    PROJECT_ROOT: Path = _PROJECT_ROOT

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{_PROJECT_ROOT / 'networking_coach.db'}"
    )

    # ========================================
    # Authentication
    # ========================================
    SECRET_KEY: str = os.getenv("SECRET_KEY", _DEV_SECRET_KEY)
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))
    MIN_PASSWORD_LENGTH: int = 8

    # ========================================
    # OpenAI Configuration
    # ========================================
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-5-2025-08-07")
    OPENAI_MAX_COMPLETION_TOKENS: int = int(os.getenv("OPENAI_MAX_COMPLETION_TOKENS", "500"))

    # ========================================
    # Server Configuration
    # ========================================
    FLASK_DEBUG: bool = os.getenv("FLASK_DEBUG", "false").lower() == "true"
    API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("API_PORT", "5000"))

    # CORS
    ALLOWED_ORIGINS: list[str] = os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:8080,http://127.0.0.1:8080"
    ).split(",")
    CORS_ALLOW_HEADERS: list[str] = ["authorization", "x-client-info", "apikey", "content-type"]

    # Rate Limiting
    RATE_LIMIT_WINDOW: int = int(os.getenv("RATE_LIMIT_WINDOW", "60"))
    RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "30"))

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not cls.OPENAI_API_KEY:
            errors.append("OPENAI_API_KEY is not set")

        if cls.OPENAI_MAX_COMPLETION_TOKENS <= 0:
            errors.append("OPENAI_MAX_COMPLETION_TOKENS must be positive")

        if not cls.FLASK_DEBUG and cls.SECRET_KEY == _DEV_SECRET_KEY:
            errors.append("SECRET_KEY must be changed for production")

        return errors


# Create singleton instance
config = Config()
