from pathlib import Path
from urllib.parse import urlparse

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Remote productivity backend
    BACKEND_BASE_URL: str = "http://localhost:8585"
    REQUEST_TIMEOUT_SECONDS: float = 15.0

    # =================================================================
    # GROWTH SETTINGS - percent per second
    # =================================================================
    GROWTH_RATE: float = 0.05  # 3% per minute when productive
    DEGRADE_RATE: float = 0.025  # 1.5% per minute otherwise
    TICK_INTERVAL_SECONDS: float = 1.0

    # Leaderboard settings
    LEADERBOARD_TOPIC: str = "BUD_E_LEADERBOARD"
    LEADERBOARD_DEFAULT_LIMIT: int = 10

    # Local state store: "memory" or "redis"
    STATE_BACKEND: str = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    STATE_KEY_PREFIX: str = "growseed:"

    # Suggestions
    GEMINI_API_ENDPOINT: str = (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-2.0-flash:generateContent"
    )

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def backend_url(self, path: str) -> str:
        """Join a backend path onto BACKEND_BASE_URL."""
        base = self.BACKEND_BASE_URL.rstrip("/")
        return f"{base}/{path.lstrip('/')}"

    def backend_host(self) -> str | None:
        """Hostname of the backend, used in log fields."""
        try:
            return urlparse(self.BACKEND_BASE_URL).hostname
        except ValueError:
            return None

    def get_growth_rates(self) -> dict:
        """
        Get growth/decay rates.
        Both rates are configured independently; neither is derived from the other.
        """
        return {
            "growth_rate": self.GROWTH_RATE,
            "degrade_rate": self.DEGRADE_RATE,
        }


settings = Settings()
