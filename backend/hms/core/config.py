from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    APP_NAME: str = "Hospital Management Backend"
    VERSION: str = "1.0.0"
    SECRET_KEY: str = "dev_secret_change_me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # No default: the process refuses to start without a datastore
    DATABASE_URL: str = Field(validation_alias=AliasChoices("DATABASE_URL", "PG_CONNECTION"))
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 10  # seconds to wait for a free connection
    DB_STATEMENT_TIMEOUT_MS: int = 15000
    AUTO_CREATE_TABLES: bool = True

    HOST: str = "0.0.0.0"
    PORT: int = 3001
    API_PREFIX: str = ""
    CORS_ORIGINS: str = "*"  # comma separated
    LOG_LEVEL: str = "INFO"

    # Bootstrap admin, created on startup when both are set
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_NAME: str = "Administrator"

    class Config:
        env_file = ".env"

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
