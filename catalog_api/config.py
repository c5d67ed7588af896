# catalog_api/config.py

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Catalog API"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    frontend_url: str = "http://localhost:5173"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Imports
    insert_batch_size: int = 500
    lookup_batch_size: int = 300
    max_upload_bytes: int = 10 * 1024 * 1024
    preview_rows: int = 50
    pending_limit: int = 200

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
