"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# Well-known ids of the placeholder hierarchy used to re-home orphaned records.
UNASSIGNED_GOAL_ID = "unassigned-goal"
UNASSIGNED_PROJECT_ID = "unassigned-project"
UNASSIGNED_TOPIC_ID = "unassigned-topic"
UNASSIGNED_NAME = "Unassigned"
UNASSIGNED_COLOR = "#64748b"

PLACEHOLDER_IDS = frozenset({UNASSIGNED_GOAL_ID, UNASSIGNED_PROJECT_ID, UNASSIGNED_TOPIC_ID})


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Pomodoro Planner Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "sqlite:///./data/pomodoro.db"
    auto_create_schema: bool = True
    bootstrap_on_startup: bool = True
    seed_on_first_run: bool = True
    store_write_timeout_seconds: float | None = 30.0
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "pomodoro-planner"
    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    repair_job_hour: int = 3
    repair_job_minute: int = 30
    jobs_run_on_startup: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
