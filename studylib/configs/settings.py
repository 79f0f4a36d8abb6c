from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    APP_NAME: str = "Studylib Library"
    APP_ENV: Literal["dev", "prod"] = "dev"
    APP_DEBUG: bool = False
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_prefix="APP_")


class CORSSettings(BaseSettings):
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: list[str] = ["GET", "POST", "PUT", "DELETE"]
    CORS_HEADERS: list[str] = ["*"]
    CORS_EXPOSE_HEADERS: list[str] = []

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CORS_")


class MongoSettings(BaseSettings):
    MONGO_HOST: str = "localhost"
    MONGO_PORT: int = 27017
    MONGO_DB: str = "studylib"
    MONGO_USER: str = ""
    MONGO_PWD: str = ""
    # Per-level path batches run inside a transaction (needs a replica set)
    MONGO_USE_TRANSACTIONS: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MONGO_")

    @property
    def MONGO_URL(self) -> str:
        credentials = f"{self.MONGO_USER}:{self.MONGO_PWD}@" if self.MONGO_USER and self.MONGO_PWD else ""
        return f"mongodb://{credentials}{self.MONGO_HOST}:{self.MONGO_PORT}"


class RedisSettings(BaseSettings):
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PWD: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", env_prefix="REDIS_")


class SentrySettings(BaseSettings):
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = Field(0.2, ge=0.0, le=1.0)
    SENTRY_SEND_DEFAULT_PII: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SENTRY_")


class AuthSettings(BaseSettings):
    AUTH_ISSUER: str = ""
    AUTH_JWKS_URL: str = ""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="AUTH_")


class MinioSettings(BaseSettings):
    MINIO_URL: str = "http://localhost:9000"
    MINIO_ACCESS_KEY: str = ""
    MINIO_SECRET_KEY: str = ""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MINIO_")

    @property
    def MINIO_SSL(self) -> bool:
        return self.MINIO_URL.startswith("https://")


class NamespaceSettings(BaseSettings):
    """Limits and locking for folder-tree mutations"""

    NAMESPACE_LOCK_BACKEND: Literal["local", "redis"] = "local"
    # Redis lock TTL; a crashed holder frees the owner after this many seconds
    NAMESPACE_LOCK_TIMEOUT: int = Field(120, gt=0)
    NAMESPACE_LOCK_BLOCKING_TIMEOUT: float = Field(30.0, gt=0)
    NAMESPACE_MAX_NAME_LENGTH: int = Field(255, gt=0)
    NAMESPACE_MAX_DEPTH: int = Field(64, gt=0)
    NAMESPACE_BULK_LIMIT: int = Field(100, gt=0)

    model_config = SettingsConfigDict(env_file=".env", env_prefix="NAMESPACE_")


class Settings(
    AppSettings,
    CORSSettings,
    MongoSettings,
    RedisSettings,
    SentrySettings,
    AuthSettings,
    MinioSettings,
    NamespaceSettings,
):
    RELEASE: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", env_prefix="")


settings = Settings()
