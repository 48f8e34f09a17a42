from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "spendtrack"
    ENV: str = "dev"

    # apps/backend/db.sqlite3 as an absolute path so the CWD does not matter
    _default_db_path = Path(__file__).resolve().parents[2] / "db.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"

    CORS_ORIGINS: list[str] = ["*"]
    TIMEZONE: str = "UTC"
    LOG_LEVEL: str = "INFO"

    # Recurring candidate detection defaults (weekly-ish cadence, <=10% drift)
    RECURRENCE_MIN_GAP_DAYS: float = 5
    RECURRENCE_MAX_GAP_DAYS: float = 9
    RECURRENCE_MAX_AMOUNT_RATIO: float = 0.10
    RECURRENCE_AMOUNT_BUCKET_WIDTH: float = 100

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="SPENDTRACK_", case_sensitive=False)


settings = Settings()
