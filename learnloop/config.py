"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is lru_cached; tests build Settings(...) directly instead
    - Persistence keys are settings, not literals: two containers can share one store

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for everything: a bare checkout runs against a local SQLite file
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables (prefix LEARNLOOP_)."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="LEARNLOOP_", case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///learnloop.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Persistence keys
    event_log_key: str = "learnloop_events"
    runs_key: str = "learnloop_compiler_runs"
    versions_key: str = "learnloop_lesson_versions"
    published_key: str = "learnloop_published_pointers"

    # Content pipeline provenance
    compiler_model: str = "mock-llm-v1"
    prompt_bundle_version: str = "v1.0.0"

    # Refresh policy
    seed_refresh_policy_days: int = 365

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
