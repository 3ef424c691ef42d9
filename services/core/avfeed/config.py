from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


# Get the directory where this config.py file is located
_config_dir = Path(__file__).parent
_env_file = _config_dir.parent / ".env"  # services/core/.env

DEFAULT_BASE_URL = "https://www.alphavantage.co/query"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 6.1; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.36"
)
MIN_API_KEY_LENGTH = 5


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_env_file),
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Alphavantage access
    alphavantage_api_key: str = Field(..., min_length=MIN_API_KEY_LENGTH)
    alphavantage_base_url: str = DEFAULT_BASE_URL
    alphavantage_user_agent: str = DEFAULT_USER_AGENT
    request_timeout_seconds: float | None = None  # None = block until the server answers

    # Live polling
    poll_interval_seconds: float = Field(default=60.0, gt=0)

    # Timestamps in Alphavantage payloads are exchange-local
    exchange_time_zone: str = "America/New_York"

    log_level: str = "INFO"

    def get_symbols(self, raw: str) -> list[str]:
        """Split a comma-separated ticker list (uppercase)."""
        return [s.strip().upper() for s in raw.split(",") if s.strip()]


def get_settings(**overrides) -> Settings:
    """Build settings, surfacing a missing or short API key as a config error."""
    from .providers.alphavantage_rest import AlphavantageConfigError

    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise AlphavantageConfigError(f"Invalid Alphavantage configuration: {exc}") from exc
