"""
Base Example Site — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Development defaults for a local Base API sandbox.
# validate_required_for_production() refuses to stay quiet about these.
DEV_ACCESS_TOKEN = "c8d4600b-6334-4b1c-8b5c-63722a923f60"
DEV_SESSION_SECRET = "secret"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development against a
    Base API instance on localhost:8080. Production deployments MUST
    override BASE_ACCESS_TOKEN and SESSION_SECRET_KEY.
    """

    # ── Base API ──────────────────────────────────────────────────────────
    # What: Root URL of the Base API; the client appends /v1/<resource>
    base_api_url: str = Field(default="http://localhost:8080")

    # What: Project access token sent as a Bearer token with every call
    base_access_token: str = Field(default=DEV_ACCESS_TOKEN)

    # What: Total seconds to wait for one API call (connect + read)
    # Hangs beyond this surface as an "unknown" failure on the page
    base_api_timeout: float = Field(default=30.0, gt=0, le=300)

    # What: Page size requested from list endpoints
    per_page: int = Field(default=10, ge=1, le=100)

    # ── Session Cookie ────────────────────────────────────────────────────
    # What: Secret used by itsdangerous to sign the session cookie
    session_secret_key: str = Field(default=DEV_SESSION_SECRET)
    session_cookie: str = Field(default="session")

    # What: Only send the cookie over HTTPS
    # Why False by default: the examples run on plain http://localhost
    session_https_only: bool = Field(default=False)

    # ── Uploads & Form Limits ─────────────────────────────────────────────
    # What: Directory for temporary upload files (deleted after each request)
    upload_dir: str = Field(default="./uploads")

    # Multipart limits applied by forms.read_form and upload_service
    max_field_name_size: int = Field(default=100, ge=1)
    max_field_size: int = Field(default=1_000_000, ge=1)
    max_file_size: int = Field(default=1_000_000, ge=1)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

    # What: Controls verbosity of application logging
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("base_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that security-sensitive settings were overridden.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises a single ValueError.
        """
        errors: List[str] = []
        if not self.base_access_token or self.base_access_token == DEV_ACCESS_TOKEN:
            errors.append(
                "BASE_ACCESS_TOKEN is not set. "
                "Copy the access token from your Base project settings."
            )
        if not self.session_secret_key or self.session_secret_key == DEV_SESSION_SECRET:
            errors.append(
                "SESSION_SECRET_KEY is not set. "
                "Session cookies are signed with a publicly known secret."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance — imported throughout the application
settings = Settings()
