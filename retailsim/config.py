from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    One instance is built at process start and handed to every store and service.
    """
    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"

    # Data paths
    data_dir: str = "data"
    items_file: str = "items.csv"
    promotions_file: str = "promotions.csv"
    orders_file: str = "orders.csv"
    reports_dir: str = "reports"

    # Order status scheduler
    auto_update_enabled: bool = False
    pending_to_shipped_seconds: int = 10
    shipped_to_delivered_seconds: int = 20
    scheduler_poll_interval_seconds: float = 1.0
    scheduler_join_timeout_seconds: float = 5.0

    # Seed data settings
    default_seed_items: int = 30
    default_seed_value: int = 42
    default_promotion_days: int = 30

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


def load_config(env_file: Optional[str] = ".env", **overrides) -> AppConfig:
    """Build a fresh AppConfig; keyword overrides win over the environment."""
    return AppConfig(_env_file=env_file, **overrides)
