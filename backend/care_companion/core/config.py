import os
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Runtime settings for the care companion."""

    # Azure AI Configuration
    AZURE_FOUNDRY_API_KEY: str = os.getenv("AZURE_FOUNDRY_API_KEY", "")
    AZURE_FOUNDRY_ENDPOINT: str = os.getenv("AZURE_FOUNDRY_ENDPOINT", "")
    AZURE_API_VERSION: str = os.getenv("AZURE_API_VERSION", "2024-12-01-preview")
    AZURE_CHAT_DEPLOYMENT: str = os.getenv("AZURE_CHAT_DEPLOYMENT", "gpt-4o")

    # Persistence
    CARE_STORAGE_PATH: str = os.getenv("CARE_STORAGE_PATH", ".care")
    CARE_STORAGE_NAME: str = os.getenv("CARE_STORAGE_NAME", "care-companion-storage")

    # Scheduling
    SCHEDULE_HORIZON_DAYS: int = 10
    HISTORY_LIMIT: int = 100
    DEFAULT_DURATION_DAYS: int = 10

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: List[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

    class Config:
        case_sensitive = True


settings = Settings()
