"""Client settings via pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client configuration loaded from environment variables with QL_CLIENT_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="QL_CLIENT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = "http://localhost:8000/api"
    timeout_seconds: float = 30.0
    retries: int = 2
    retry_backoff_seconds: float = 0.5
    # Upper bound on a dashboard refresh before loading is forced off
    loading_timeout_seconds: float = 3.0
