from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Application ---
    PROJECT_NAME: str = "Meat_Shop_API"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # --- Database ---
    DATABASE_URL: str = "sqlite:///./meatshop.db"
    DB_CONNECT_RETRIES: int = 10
    DB_RETRY_WAIT_SECONDS: int = 3

    # --- Optional Redis (idempotency keys). Falls back to RAM when unset ---
    REDIS_URL: str | None = None
    IDEMPOTENCY_TTL_SECONDS: int = 86400

    # --- Session cookie ---
    SESSION_SECRET: str = "meatshop-dev-secret"
    SESSION_COOKIE_NAME: str = "auth_user_id"
    SESSION_MAX_AGE: int = 30 * 24 * 60 * 60

    # --- First admin account. Created at startup when ADMIN_PASSWORD is set ---
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@meatshop.mn"
    ADMIN_PASSWORD: str | None = None

    # --- Delivery ---
    TIMEZONE: str = "Asia/Ulaanbaatar"
    DEFAULT_LANGUAGE: str = "mn"
    DELIVERY_SEARCH_DAYS: int = 365

    # --- Order policies ---
    # "skip": keep the item and log when its product is gone (historical behaviour)
    # "reject": fail the whole order
    MISSING_PRODUCT_POLICY: str = "skip"
    RESTORE_STOCK_ON_CANCEL: bool = True

    # --- Media bucket (local directory served under MEDIA_URL_PREFIX) ---
    MEDIA_ROOT: str = "uploads"
    MEDIA_URL_PREFIX: str = "/uploads"

    # --- Admin notifications (Twilio WhatsApp). Disabled when missing ---
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_FROM_NUMBER: str | None = None
    ADMIN_PHONE_NUMBER: str | None = None

    # --- Configuration ---
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # Unknown variables in .env are ignored instead of crashing
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

settings = Settings()
