from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="RIFTDECK_")

    app_name: str = "riftdeck"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/riftdeck"

    # Used by the HTTP deck store / card catalog clients
    api_base_url: str = "http://localhost:8000"
    request_timeout: float = 10.0

    # Header carrying the caller's user id, set by the authenticating proxy
    user_id_header: str = "X-User-Id"


settings = Settings()
