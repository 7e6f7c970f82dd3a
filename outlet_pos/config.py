from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Outlet POS"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./outlet_pos.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Billing
    # ==============================
    TAX_RATE: float = 0.10
    BILL_NUMBER_MAX_ATTEMPTS: int = 3
    BUSINESS_TZ: str = "local"

    # ==============================
    # Inventory & Reports
    # ==============================
    DEFAULT_MIN_STOCK_LEVEL: int = 10
    TOP_PRODUCTS_LIMIT: int = 10


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
