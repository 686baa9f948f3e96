"""Application configuration via environment variables."""

from decimal import Decimal
from pathlib import Path

from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'trade_journal.db'}"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]  # Vite dev server

    # `python -m tradejournal.cli serve`
    host: str = "127.0.0.1"
    port: int = 8000

    # Price scaling workaround for NUMERIC(10,5) columns
    storage_price_limit: Decimal = Decimal("100000")
    price_scale_factor: int = 10

    model_config = {"env_prefix": "TJ_", "env_file": ".env"}


settings = Settings()
