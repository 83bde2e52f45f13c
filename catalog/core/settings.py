from __future__ import annotations

from typing import Tuple

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Încarcă variabilele din .env (pe host). În Docker vin din env_file/environment.
load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field("dev")
    APP_TITLE: str = "catalog-api"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Stocare: câte un fișier SQLite per colecție
    PRODUCT_DB_PATH: str = Field("data/products.db", description="Product collection file")
    SKU_DB_PATH: str = Field("data/skus.db", description="Sku collection file")
    DB_ECHO: bool = False

    # Adresa de ascultare, ex. "[::1]:50054" sau "0.0.0.0:8000"
    SERVICE_ADDR: str = "[::1]:50054"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    def service_host_port(self) -> Tuple[str, int]:
        """Desparte SERVICE_ADDR în (host, port); acceptă IPv6 între paranteze."""
        host, sep, port = self.SERVICE_ADDR.strip().rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"Invalid SERVICE_ADDR: {self.SERVICE_ADDR!r}")
        host = host.strip("[]") or "127.0.0.1"
        return host, int(port)


def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
