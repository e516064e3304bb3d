from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Job Tracker"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8080
    log_level: str = "INFO"

    database_url: str = "sqlite:///./data/jobtracker.db"
    database_echo: bool = False
    data_dir: Path = Path("./data")

    default_page_size: int = 10
    max_page_size: int = 200

    api_base_url: str = "http://127.0.0.1:8080"
    api_timeout_sec: int = 10
    cors_origins: str = "http://127.0.0.1:8080"

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("max_page_size")
    @classmethod
    def validate_max_page_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_page_size must be >= 1")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
