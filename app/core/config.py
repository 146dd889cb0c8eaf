import os
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # App
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "fallback-secret-key-for-development")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    TIMEZONE: str = os.getenv("TIMEZONE", "Africa/Nairobi")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_STATEMENT_TIMEOUT_MS: int = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "10000"))

    # SendGrid
    SENDGRID_API_KEY: str = os.getenv("SENDGRID_API_KEY", "")
    FROM_EMAIL: str = os.getenv("FROM_EMAIL", "bookings@jazzmanhousecalls.com")
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@jazzmanhousecalls.com")
    EMAIL_TIMEOUT_SECONDS: float = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))

    # Default admin account, created on first start
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "change-me-on-first-login")

    # Scheduling
    SERVICE_DURATION_MINUTES: int = int(os.getenv("SERVICE_DURATION_MINUTES", "60"))
    TRAVEL_BUFFER_MINUTES: int = int(os.getenv("TRAVEL_BUFFER_MINUTES", "60"))
    GLOBAL_SLOT_LOCK: bool = os.getenv("GLOBAL_SLOT_LOCK", "False").lower() == "true"

    # Block expiry sweep
    ENABLE_BLOCK_SWEEP: bool = os.getenv("ENABLE_BLOCK_SWEEP", "True").lower() == "true"
    BLOCK_SWEEP_INTERVAL_MINUTES: int = int(os.getenv("BLOCK_SWEEP_INTERVAL_MINUTES", "30"))

    # Barber daily summary email, sent once a day for the previous day
    ENABLE_DAILY_SUMMARY: bool = os.getenv("ENABLE_DAILY_SUMMARY", "True").lower() == "true"
    DAILY_SUMMARY_HOUR: int = int(os.getenv("DAILY_SUMMARY_HOUR", "6"))

    # Render
    RENDER_EXTERNAL_URL: str = os.getenv("RENDER_EXTERNAL_URL", "")
    RENDER: bool = os.getenv("RENDER", "False").lower() == "true"

    @property
    def IS_PRODUCTION(self):
        return self.RENDER or bool(self.RENDER_EXTERNAL_URL)

    @property
    def CORS_ORIGIN_LIST(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def PROTECTED_WINDOW_MINUTES(self):
        """Length of time a booking keeps its barber busy (service + travel)."""
        return self.SERVICE_DURATION_MINUTES + self.TRAVEL_BUFFER_MINUTES

settings = Settings()
