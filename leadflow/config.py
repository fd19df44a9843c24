"""
LeadFlow - Configuration
Environment-based settings with Pydantic validation
"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "LeadFlow"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database - Supabase
    supabase_url: str
    supabase_key: str

    # Tables
    table_leads: str = "leads"
    table_interactions: str = "interactions"
    table_pipeline_stages: str = "pipeline_stages"

    # Chat import
    my_sender_name: str = "Miwebya"
    duplicate_tolerance_seconds: int = 60

    # Timeline
    follow_up_threshold_hours: int = 24

    # Scheduling
    max_next_action_note_length: int = 140

    # CORS
    allowed_origins: List[str] = ["*"]


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()


# Convenience export
settings = get_settings()
