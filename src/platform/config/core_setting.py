from pathlib import Path
from typing import Annotated, List, Literal

import orjson
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'EventPulse'
    VERSION: str = '0.1.0'
    DEBUG: bool = False
    LOG_FILE_ENABLED: bool = False

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ALGORITHM: str = 'HS256'

    # CORS: comma separated or a JSON list
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and v.strip().startswith('['):
            return [str(i) for i in orjson.loads(v)]
        if isinstance(v, str):
            return [i.strip() for i in v.split(',') if i.strip()]
        if isinstance(v, list):
            return v
        return []

    # Record store
    RECORD_STORE_BACKEND: Literal['postgres', 'memory'] = 'postgres'

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'eventpulse'
    POSTGRES_PASSWORD: SecretStr = SecretStr('eventpulse')
    POSTGRES_DB: str = 'eventpulse'

    # SQLAlchemy pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Payment provider (Razorpay). Both keys empty -> mock mode.
    RAZORPAY_KEY_ID: str = ''
    RAZORPAY_KEY_SECRET: SecretStr = SecretStr('')
    RAZORPAY_API_BASE_URL: str = 'https://api.razorpay.com/v1'
    PAYMENT_CURRENCY: str = 'INR'
    PAYMENT_PROVIDER_TIMEOUT_SECONDS: float = 10.0

    @property
    def is_mock_payment(self) -> bool:
        return not (self.RAZORPAY_KEY_ID and self.RAZORPAY_KEY_SECRET.get_secret_value())

    # Reservation holds
    RESERVATION_HOLD_TTL_SECONDS: int = 15 * 60
    HOLD_REAPER_INTERVAL_SECONDS: int = 60

    # Email (SMTP). User or password empty -> mock mode.
    SMTP_HOST: str = 'smtp.gmail.com'
    SMTP_PORT: int = 587
    SMTP_USER: str = ''
    SMTP_PASSWORD: SecretStr = SecretStr('')
    EMAIL_FROM: str = 'EventPulse <no-reply@eventpulse.local>'

    @property
    def is_mock_email(self) -> bool:
        return not (self.SMTP_USER and self.SMTP_PASSWORD.get_secret_value())


settings = Settings()  # type: ignore
