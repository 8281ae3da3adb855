from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/moneyview.db"

    # Auth
    secret_key: str = "dev-secret-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # Business defaults
    business_timezone: str = "UTC"
    currency_symbol: str = "₹"
    default_business_name: str = "MoneyView"

    # Income cache
    income_cache_ttl_seconds: int = 300  # 5 minutes

    # Logging
    log_level: str = "INFO"

    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.database_url
