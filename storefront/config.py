from typing import Dict, List, Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings

from storefront.constants.gst import (
    DEFAULT_HOME_STATE,
    DEFAULT_LINKED_REGIONS,
    SHIPPING_GST_RATE,
    SUPPORTED_GST_RATES,
)


class Settings(BaseSettings):
    postgres_user: str = "storefront"
    postgres_password: str = ""
    postgres_db: str = "storefront"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # overrides the postgres_* fields when set (sqlite in tests)
    sqlalchemy_database_url: Optional[str] = None

    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    ENV: str = "local"
    log_level: str = "INFO"
    store_name: str = "Storefront"
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # GST defaults, used until an admin saves GST settings
    home_state: str = DEFAULT_HOME_STATE
    linked_regions: Dict[str, List[str]] = DEFAULT_LINKED_REGIONS
    shipping_gst_rate: int = SHIPPING_GST_RATE
    supported_gst_rates: List[int] = list(SUPPORTED_GST_RATES)

    invoice_dir: str = "invoices"
    config_cache_ttl_seconds: int = 300

    @property
    def database_url(self):
        if self.sqlalchemy_database_url:
            return self.sqlalchemy_database_url
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
