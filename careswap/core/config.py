from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "CareSwap"
    environment: str = "dev"

    log_level: str = "INFO"
    log_file: Optional[str] = None

    # suggestion engine
    max_suggestions: int = 5
    min_reason_length: int = 10

    # REST backend that owns persistence. Unset means in-memory (dev and demos).
    backend_url: Optional[str] = None
    backend_timeout: float = 20.0
    backend_token: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
