# vendoriq/core/config.py
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    PROJECT_NAME: str = "VendorIQ"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = "sqlite:///./vendoriq.db"

    # Security
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60

    # Accounts
    TRIAL_PERIOD_DAYS: int = 30

    # OTP Settings
    OTP_EXPIRY_MINUTES: int = 5
    OTP_LOG_CODES: bool = True  # print issued codes to the server log (development aid)

    # Redis (optional - OTPs fall back to process memory without it)
    REDIS_URL: Optional[str] = None
    REDIS_SOCKET_TIMEOUT: float = 2.0
    REDIS_RETRY_SECONDS: int = 30

    # Email (SMTP)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    FROM_EMAIL: Optional[str] = None

    # SMS (Twilio)
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None

    # Payment gateway (Razorpay)
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[str] = None
    RAZORPAY_BASE_URL: str = "https://api.razorpay.com/v1"
    SUBSCRIPTION_CURRENCY: str = "INR"

    # File uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # Debug mode
    DEBUG: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
