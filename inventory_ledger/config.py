from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Inventory Ledger"
    ENVIRONMENT: str = "local"

    # ==============================
    # Storage
    # ==============================
    DATA_DIR: str = "data"
    LOCK_DIR: Optional[str] = None

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Stock Mutex
    # ==============================
    STOCK_LOCK_NAME: str = "stock_transaction"
    LOCK_MAX_RETRIES: int = 20
    LOCK_RETRY_DELAY_MS: int = 100
    LOCK_STALE_TIMEOUT_MS: int = 5000

    # ==============================
    # Stock Rules
    # ==============================
    LOW_STOCK_THRESHOLD_MULTIPLIER: float = 1.2
    OVERSTOCKED_THRESHOLD_MULTIPLIER: float = 3.0

    # ==============================
    # Transfers
    # ==============================
    TRANSFER_REFERENCE_PREFIX: str = "TRF"
    TRANSFER_PAGE_LIMIT_MAX: int = 100

    @property
    def lock_dir(self) -> str:
        return self.LOCK_DIR or self.DATA_DIR


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
