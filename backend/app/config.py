"""
IronLog Configuration
=====================
All environment variables in one place. Pydantic Settings validates
types at startup so a bad value fails on boot rather than mid-workout.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Loaded from environment variables or a .env file."""

    # --- Supabase ---
    supabase_url: str = "http://localhost:54321"
    supabase_service_key: str = ""  # service_role key for backend operations

    # --- App settings ---
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:8081", "http://localhost:19006"]

    # --- Active workout ---
    # Used when a prescription carries no rest duration
    default_rest_seconds: int = 60
    # Amount added by the "+30s" button
    rest_extension_seconds: int = 30
    rest_tick_seconds: float = 1.0
    # If False the client is expected to drive the countdown itself.
    enable_rest_countdown: bool = True
    # Live sessions untouched for this long are aborted and dropped
    session_idle_timeout_seconds: int = 4 * 60 * 60

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
