import os
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application configuration from environment variables"""

    # App
    app_name: str = "Guest Reception Tracker"
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"
    app_url: str = os.getenv("APP_URL", "")

    # Google Sheets
    google_service_account_json: str = os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", "")
    google_sheets_id: str = os.getenv("GOOGLE_SHEETS_ID", "")
    sheet_name: str = "Reservations"
    sheet_range: str = "A1:AD"

    # Email (SMTP)
    email_from: str = os.getenv("EMAIL_FROM", "noreply@yumedono.com")
    smtp_host: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    smtp_port: int = 587
    smtp_user: str = os.getenv("SMTP_USER", "")
    smtp_password: str = os.getenv("SMTP_PASSWORD", "")

    # Property
    hotel_name_ja: str = "夢殿"
    hotel_name_en: str = "Yumedono"
    default_language: str = "ja"

    # Reminders
    reminder_thresholds: list[int] = [30, 21, 14, 7]
    reminder_hour: int = 9
    timezone: str = "Asia/Tokyo"
    scheduler_enabled: bool = True

    # Test data
    test_booking_prefix: str = "TEST-"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
