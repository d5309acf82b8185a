# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./storefront.db"
    # Seconds a caller waits on a locked/unreachable database before StorageError
    DB_TIMEOUT_SECONDS: int = 10

    FRONTEND_URL: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    # Pricing policy shared by cart totals and order creation
    SHIPPING_FLAT_FEE: float = 40.0
    TAX_RATE: float = 0.05

    DELIVERY_ESTIMATE_DAYS: int = 7
    ORDER_NUMBER_MAX_ATTEMPTS: int = 5

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
