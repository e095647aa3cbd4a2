from typing import Annotated, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_PROJECT_NAME = "GSO Library API"
DEFAULT_API_PREFIX = "/api/v1"


def _split_csv(value):
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return []
        if value == '*':
            return ['*']
        return [item.strip() for item in value.split(',') if item.strip()]
    return value


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    PROJECT_NAME: str = DEFAULT_PROJECT_NAME
    API_PREFIX: str = DEFAULT_API_PREFIX
    ENV: str = 'development'
    DEBUG: bool = False

    DATABASE_URL: str = 'sqlite:///./gso_library.db'
    LOG_LEVEL: str = 'INFO'
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ['http://localhost:5173']
    AUTO_CREATE_TABLES: bool = False

    JWT_SECRET_KEY: str
    JWT_ISSUER: str = 'gso-library'
    JWT_AUDIENCE: str = 'gso-library-clients'
    ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    REFRESH_TOKEN_BYTES: int = 64

    ROLES: Annotated[list[str], NoDecode] = ['Admin', 'Editor', 'User']
    ADMIN_ROLE: str = 'Admin'
    DEFAULT_ROLE: str = 'User'
    PASSWORD_MIN_LENGTH: int = 8
    BCRYPT_ROUNDS: int = 12

    SEED_USERS_FILE: Optional[str] = None

    @field_validator('CORS_ORIGINS', 'ROLES', mode='before')
    @classmethod
    def parse_csv(cls, value):  # type: ignore[override]
        return _split_csv(value)

    @field_validator('JWT_SECRET_KEY')
    @classmethod
    def check_secret_key(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError('JWT_SECRET_KEY must not be empty')
        if len(value) < 32:
            raise ValueError('JWT_SECRET_KEY must be at least 32 characters for HS256')
        return value

    @field_validator('REFRESH_TOKEN_BYTES')
    @classmethod
    def check_refresh_token_bytes(cls, value: int) -> int:
        if value < 64:
            raise ValueError('REFRESH_TOKEN_BYTES must be at least 64')
        return value


settings = Settings()
