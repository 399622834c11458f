from typing import List, Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.platform.constant.path import ENV_EXAMPLE_FILE, ENV_FILE


_ENV_FILE = ENV_FILE if ENV_FILE.exists() else ENV_EXAMPLE_FILE


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticket Purchasing'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'ticket_purchasing'
    POSTGRES_PORT: int = 5432

    # Full async URL override (e.g. sqlite+aiosqlite:///./purchasing.db for local dev)
    DATABASE_URL: str = ''

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'

    # Connection pool (ignored by SQLite)
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a connection
    DB_POOL_RECYCLE: int = 1800  # seconds before a connection is recycled
    DB_POOL_PRE_PING: bool = True
    SQLITE_BUSY_TIMEOUT_MS: int = 5000

    # Payment gateway
    PAYMENT_CURRENCY: str = 'USD'
    PAYMENT_GATEWAY_BACKEND: Literal['http', 'in_memory'] = 'in_memory'
    PAYMENT_GATEWAY_BASE_URL: str = 'http://localhost:9000'
    PAYMENT_GATEWAY_API_KEY: SecretStr = SecretStr('test_gateway_api_key')
    PAYMENT_GATEWAY_WEBHOOK_SECRET: SecretStr = SecretStr('test_webhook_secret')
    PAYMENT_GATEWAY_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_GATEWAY_MAX_RETRIES: int = 2  # retries after the first attempt
    PAYMENT_GATEWAY_RETRY_BACKOFF_SECONDS: float = 0.2
    # Hosted page of the in-memory gateway (served by /api/payment/mockpay)
    MOCK_CHECKOUT_BASE_URL: str = 'http://localhost:8000/api/payment/mockpay'

    # Purchases left unpaid longer than this are cancelled by the expiry job
    PURCHASE_PENDING_TTL_MINUTES: int = 30
    PURCHASE_EXPIRY_SWEEP_INTERVAL_SECONDS: int = 60  # 0 disables the background sweep


settings = Settings()  # type: ignore
