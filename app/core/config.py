from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # DB
    DATABASE_URL: str = "sqlite:///./catalog.db"

    # Security / JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Logging
    LOG_LEVEL: str = "INFO"

    # Pricing
    BUNDLE_DISCOUNT_PERCENTAGE: float = 5.0
    SLOW_PRICE_CALCULATION_MS: float = 30.0

    # Lifecycle / SKU
    HISTORY_DEFAULT_LIMIT: int = 50
    HISTORY_MAX_LIMIT: int = 500
    DEFAULT_CATEGORY_CODE: str = "GEN"

    # First admin, created at startup when set; every other account registers as "user"
    INITIAL_ADMIN_USERNAME: Optional[str] = None
    INITIAL_ADMIN_PASSWORD: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
