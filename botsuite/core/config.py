"""
botsuite/core/config.py

Purpose: Application configuration

- Loads environment variables (and .env)
- Centralizes config values (paths, secrets, bot credentials, object store)
- Builds the explicit bot configuration mapping once at startup
- Validates configuration before serving traffic
"""

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, Optional, Literal


DEFAULT_SESSION_SECRET = "change-this-secret"

# Bots with a dedicated instruction template
BUILTIN_BOTS = ("image", "report", "paper", "data")


class BotConfig(BaseModel):
    """Model identifier and API key for a single bot."""
    model: str
    api_key: str


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    PORT: int = Field(
        default=3000,
        description="Port used when running the module directly"
    )
    CORS_ORIGINS: list = Field(
        default=[],
        description="Allowed CORS origins (pages are served same-origin)"
    )

    # Session
    SESSION_SECRET: str = Field(
        default=DEFAULT_SESSION_SECRET,
        description="Secret used to sign session cookies"
    )
    SESSION_COOKIE_NAME: str = Field(
        default="suite.sid",
        description="Name of the session cookie"
    )
    SESSION_MAX_AGE_SECONDS: int = Field(
        default=60 * 60 * 24,
        description="Fixed session lifetime in seconds"
    )

    # Storage
    DATA_DIR: str = Field(default="data", description="Directory holding persistent data")
    USERS_FILE: str = Field(default="data/users.json", description="Credential store file")
    UPLOAD_DIR: str = Field(default="uploads", description="Scratch directory for uploads")
    PUBLIC_DIR: str = Field(default="public", description="Static pages directory")

    # Uploads and extraction
    MAX_UPLOAD_BYTES: int = Field(
        default=25 * 1024 * 1024,
        description="Upload size ceiling in bytes"
    )
    EXTRACT_TEXT_LIMIT: int = Field(
        default=12000,
        description="Characters of extracted text kept before truncation"
    )
    CSV_PREVIEW_ROWS: int = Field(
        default=30,
        description="Number of CSV records included in the preview"
    )

    # Security
    ALLOW_PLAINTEXT_PASSWORDS: bool = Field(
        default=True,
        description="Accept legacy plaintext passwords in the users file"
    )

    # Generative API
    GEMINI_API_BASE: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Generative language API base URL"
    )
    GEMINI_API_VERSION: str = Field(default="v1beta", description="API version path segment")
    BOT_REQUEST_TIMEOUT: float = Field(
        default=120.0,
        description="Generative API request timeout in seconds"
    )

    # Per-bot credentials
    BOT_IMAGE_MODEL: Optional[str] = None
    BOT_IMAGE_KEY: Optional[str] = None
    BOT_REPORT_MODEL: Optional[str] = None
    BOT_REPORT_KEY: Optional[str] = None
    BOT_PAPER_MODEL: Optional[str] = None
    BOT_PAPER_KEY: Optional[str] = None
    BOT_DATA_MODEL: Optional[str] = None
    BOT_DATA_KEY: Optional[str] = None
    EXTRA_BOTS: Dict[str, BotConfig] = Field(
        default={},
        description='Additional bots as JSON, e.g. {"notes": {"model": "...", "api_key": "..."}}'
    )

    # Object store (S3 compatible, e.g. Cloudflare R2)
    R2_ENDPOINT: Optional[str] = None
    R2_ACCESS_KEY_ID: Optional[str] = None
    R2_SECRET_ACCESS_KEY: Optional[str] = None
    R2_BUCKET: Optional[str] = None
    R2_PUBLIC_URL: Optional[str] = None

    @field_validator("SESSION_SECRET")
    @classmethod
    def validate_session_secret(cls, v, info: ValidationInfo):
        """Ensure session secret is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == DEFAULT_SESSION_SECRET:
            raise ValueError("SESSION_SECRET must be changed in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    def _bot_pair(self, bot_id: str):
        upper = bot_id.upper()
        return getattr(self, f"BOT_{upper}_MODEL"), getattr(self, f"BOT_{upper}_KEY")

    @property
    def bots(self) -> Dict[str, BotConfig]:
        """Fully configured bots keyed by bot id."""
        configured = {}
        for bot_id in BUILTIN_BOTS:
            model, key = self._bot_pair(bot_id)
            if model and key:
                configured[bot_id] = BotConfig(model=model, api_key=key)
        for bot_id, config in self.EXTRA_BOTS.items():
            configured.setdefault(bot_id, config)
        return configured

    @property
    def object_store_enabled(self) -> bool:
        return all([
            self.R2_ENDPOINT,
            self.R2_ACCESS_KEY_ID,
            self.R2_SECRET_ACCESS_KEY,
            self.R2_BUCKET,
        ])


# Global settings instance
settings = Settings()


def validate_settings(config: Optional[Settings] = None):
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    config = config or settings
    errors = []

    # A bot is either fully configured or not configured at all
    for bot_id in BUILTIN_BOTS:
        model, key = config._bot_pair(bot_id)
        if bool(model) != bool(key):
            missing = f"BOT_{bot_id.upper()}_KEY" if model else f"BOT_{bot_id.upper()}_MODEL"
            errors.append(f"{missing} is required when bot '{bot_id}' is configured")

    store_values = [
        config.R2_ENDPOINT,
        config.R2_ACCESS_KEY_ID,
        config.R2_SECRET_ACCESS_KEY,
        config.R2_BUCKET,
    ]
    if any(store_values) and not all(store_values):
        errors.append(
            "R2_ENDPOINT, R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY and R2_BUCKET must be set together"
        )

    if config.MAX_UPLOAD_BYTES <= 0:
        errors.append("MAX_UPLOAD_BYTES must be positive")
    if config.EXTRACT_TEXT_LIMIT <= 0:
        errors.append("EXTRACT_TEXT_LIMIT must be positive")

    # Production-specific validations
    if config.is_production:
        if config.SESSION_SECRET == DEFAULT_SESSION_SECRET:
            errors.append("SESSION_SECRET must be changed in production")
        if config.ALLOW_PLAINTEXT_PASSWORDS:
            errors.append("ALLOW_PLAINTEXT_PASSWORDS must be disabled in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
