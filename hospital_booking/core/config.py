from pydantic_settings import BaseSettings
from typing import List
import os

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Hospital Appointment System"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")

    # Storage backend: "memory", "file" or "database"
    STORE_BACKEND: str = "memory"
    DATA_FILE: str = "data/hospital.json"
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./hospital.db")
    TEST_DATABASE_URL: str = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

    # Booking rules
    STRICT_STATUS_TRANSITIONS: bool = True

    # Reminders (simulated SMS)
    REMINDERS_ENABLED: bool = True
    REMINDER_INTERVAL_SECONDS: float = 60.0

    # CORS / hosts
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080", "http://testserver"]
    ALLOWED_HOSTS: List[str] = ["localhost", "127.0.0.1", "*.localhost", "testserver"]

    @property
    def get_database_url(self):
        """Return the appropriate database URL based on if we're testing"""
        if self.TESTING:
            return self.TEST_DATABASE_URL
        return self.DATABASE_URL

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
