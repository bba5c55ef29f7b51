from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"  # local|test|production
    APP_NAME: str = "Farm Resort API"
    # Comma-separated origins for CORS (e.g. https://farmresort.sa,https://admin.farmresort.sa). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    # Resort-local zone; "today" and the past-date rule are evaluated here
    TIMEZONE: str = "Asia/Riyadh"

    BOOKING_REF_PREFIX: str = "FR"

    OTP_TTL_MINUTES: int = 10
    OTP_SWEEP_SECONDS: int = 300

    # GreenAPI (WhatsApp)
    GREENAPI_ENABLED: bool = False
    GREENAPI_INSTANCE_ID: str = ""
    GREENAPI_API_TOKEN: str = ""
    GREENAPI_BASE_URL: str = "https://api.green-api.com"

    # Per-IP fixed windows, counted in Redis
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_BOOKING_PER_HOUR: int = 10
    RATE_LIMIT_OTP_PER_10_MIN: int = 3
    RATE_LIMIT_LOGIN_PER_15_MIN: int = 5
    # Comma-separated proxy addresses whose X-Forwarded-For is honoured. Empty: key on the socket peer.
    TRUSTED_PROXIES: str = ""

    # Seed
    ADMIN_EMAIL: str = "admin@farmresort.com"
    ADMIN_INITIAL_PASSWORD: str = "changeme123"

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @model_validator(mode="after")
    def check_production_secret(self):
        if self.is_production and len(self.SECRET_KEY or "") < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        return self


settings = Settings()
