import logging
from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Service
    service_name: str = "sora-engine"
    server_port: int = 8086
    service_version: str = "1.0.0"

    # Database Type Selection (postgres or sqlite)
    db_type: str = "postgres"

    # PostgreSQL Configuration
    db_host: str = "postgres"
    db_port: int = 5432
    db_name: str = "sora"
    db_user: str = "sora"
    db_password: str = ""

    # SQLite Configuration (local runs and tests)
    sqlite_path: str = "sora.db"

    # Connection Pool Configuration
    db_pool_size: int = 5
    db_pool_overflow: int = 10

    # Object storage for uploaded geo / technical files
    storage_dir: str = "storage"
    storage_bucket: str = "sora-file"
    storage_public_base_url: str = "http://localhost:8086/storage"

    # Role allowed to read and write every user's studies
    admin_role: str = "super_agent"

    # Re-assessment Scheduler
    reassessment_schedule_hour: int = 3
    reassessment_enabled: bool = True

    @field_validator("db_port", "server_port", "reassessment_schedule_hour", mode="before")
    @classmethod
    def empty_str_to_default(cls, v: Any, info: Any) -> Any:
        if isinstance(v, str) and v.strip() == "":
            defaults = {"db_port": 5432, "server_port": 8086, "reassessment_schedule_hour": 3}
            return defaults.get(info.field_name, 0)
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def database_url(self) -> str:
        if self.db_type == "sqlite":
            return f"sqlite:///{self.sqlite_path}"
        return (
            f"postgresql+psycopg2://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
