# app/core/config.py
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./marketplace.db"

    # JWT
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Auth cookie
    COOKIE_NAME: str = "Authentication"
    PASSWORD_HASH_ROUNDS: int = 10

    # Email (Resend)
    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "onboarding@resend.dev"

    # Front end
    APP_NAME: str = "Shop App"
    APP_URL: str = "http://localhost:3000"
    FRONT_URL: str = "http://localhost:3000"
    SUCCESS_URL: str = "/checkout/success"
    CANCEL_URL: str = "/checkout/cancel"

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    STRIPE_CURRENCY: str = "usd"

    # Uploads
    UPLOAD_DIR: str = "uploads"
    # Public base URL of this API, used for absolute image links
    API_URL: str = "http://localhost:8000"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
