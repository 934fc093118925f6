from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Deployment environment
    DEPLOYMENT_ENV: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    # "json" for structured output, "text" for local development
    LOG_FORMAT: str = "json"

    # Integrity telemetry
    # Pastes strictly longer than this many characters are significant.
    INTEGRITY_PASTE_THRESHOLD_CHARS: int = Field(default=50, ge=0)
    # Legacy parity: blurring any question clears the focused question, even
    # when the blurred id is not the one currently focused.
    INTEGRITY_BLUR_CLEARS_ANY_FOCUS: bool = False
    # Idle tracking sessions are evicted from memory after this long.
    INTEGRITY_SESSION_TTL_SECONDS: int = Field(default=6 * 60 * 60, ge=1)

    # URLs
    FRONTEND_URL: str = "http://localhost:3000"
    # Optional comma-separated extra CORS origins (e.g. Vercel preview URL)
    CORS_EXTRA_ORIGINS: Optional[str] = None

    # Sentry
    SENTRY_DSN: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return (self.DEPLOYMENT_ENV or "").strip().lower() == "production"

    @property
    def resolved_log_level(self) -> str:
        level = (self.LOG_LEVEL or "").strip().upper()
        return level or "INFO"

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
