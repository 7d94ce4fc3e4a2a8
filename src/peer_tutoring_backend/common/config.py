'''
Holds all the configurations
'''
from datetime import datetime
from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    """
    # Application Metadata
    APP_NAME: str = "Peer Tutoring Backend"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "The backend API matching student tutors with students seeking tutoring."
    TEST_MODE: bool = False

    # Database URL
    DATABASE_URL_PROD: str = "sqlite+aiosqlite:///./peer_tutoring.db"
    DATABASE_URL_TEST: str = "sqlite+aiosqlite:///./peer_tutoring_test.db"
    DB_ECHO: bool = False
    LOG_LEVEL: str = "INFO"
    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL_PROD

    # Fixed "now" for manual testing, e.g. 2025-01-20T10:00:00. Unset = real time.
    SIMULATION_DATETIME: Optional[datetime] = None

    # Other settings
    SEED_SUBJECTS_ON_STARTUP: bool = True
    BACKEND_CORS_ORIGINS: list[str] = []

    class Config:
        env_file = ".env" # automatically loads the .env

# Create a single, importable instance of the settings
settings = Settings()
