from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pydantic import field_validator

DEFAULT_SECRET = 'your-super-secret-key-here-change-in-production'


class Settings(BaseSettings):
    # Database settings
    POSTGRES_USER: str = 'facturacion_user'
    POSTGRES_PASSWORD: str = 'facturacion_pass'
    POSTGRES_DB: str = 'facturacion'
    POSTGRES_HOST: str = 'postgres'
    POSTGRES_PORT: int = 5432
    # Full URL override, e.g. sqlite:///./facturacion.db for local runs
    DATABASE_URL: Optional[str] = None

    # JWT settings
    APP_SECRET_STRING: str = DEFAULT_SECRET
    ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def uses_default_secret(self) -> bool:
        return self.APP_SECRET_STRING == DEFAULT_SECRET

    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)


@lru_cache
def get_settings() -> Settings:
    """Settings cargados una sola vez desde entorno / .env."""
    return Settings()
