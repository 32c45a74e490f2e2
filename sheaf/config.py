"""Sheaf configuration — loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "SHEAF_", "env_file": ".env"}

    # LLM API keys
    anthropic_api_key: str = ""
    google_api_key: str = ""
    xai_api_key: str = ""

    # Analysis defaults
    default_provider: str = "claude"
    default_language: str = "한국어"
    request_timeout: float = 300.0

    # Sessions
    session_ttl: float = 3600.0
    max_sessions: int = 100

    # Notes
    vault_path: str = "."

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"


settings = Settings()
