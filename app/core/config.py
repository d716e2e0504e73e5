from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    # Database - local SQLite file by default, override with environment variable for production
    DATABASE_URL: str = "sqlite:///./budgets.db"

    # App Settings
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Budgets
    BUDGET_DEFAULT_ALERT_THRESHOLD: int = 80
    # "same_period" only blocks overlapping budgets of the same period type,
    # "any_period" also blocks monthly/yearly combinations that overlap in time
    BUDGET_OVERLAP_POLICY: str = "same_period"

    # Spend aggregation
    SPEND_AGGREGATION_MAX_WORKERS: int = 4
    AGGREGATION_RETRY_AFTER_SECONDS: int = 5

    class Config:
        # Use absolute path to .env file
        env_file = Path(__file__).parent.parent.parent / ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"


settings = Settings()
