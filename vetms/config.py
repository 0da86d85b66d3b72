# vetms/config.py

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VETMS_",
        env_file=".env",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Path("data")
    database_url: Optional[str] = None
    busy_timeout: float = 5.0

    # Invoices
    invoice_prefix: str = "MBV"
    write_retries: int = 2

    # Logging
    log_level: str = "INFO"

    # CORS
    allowed_origins: List[str] = ["*"]

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'vetms.sqlite'}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
