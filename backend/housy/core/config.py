from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Housy API"
    app_env: str = "dev"
    log_level: str = "INFO"
    secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    database_url: str = "sqlite+aiosqlite:///./housy.db"
    cors_allow_origins: str = "http://localhost:3000"
    invite_code_length: int = 6
    default_bill_reminder_days: int = 3
    password_min_length: int = 6

    @property
    def cors_origins(self) -> list[str]:
        return [x.strip() for x in self.cors_allow_origins.split(",") if x.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
