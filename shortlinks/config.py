import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Explicitly load .env from project root (parent of shortlinks/)
ENV_PATH = Path(__file__).parent.parent / ".env"
DEV_DB_PATH = Path(__file__).parent.parent / "shortlinks_dev.db"


@dataclass(frozen=True)
class Settings:
    environment: str = "dev"
    database_url: str = f"sqlite:///{DEV_DB_PATH}"
    public_base_url: str | None = None
    log_level: str = "INFO"
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def is_prod(self) -> bool:
        return self.environment == "prod"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(ENV_PATH)
        environment = os.getenv("ENVIRONMENT", "dev")

        # Dev: SQLite (zero config), Prod: PostgreSQL
        database_url = os.getenv("DATABASE_URL")
        if environment == "prod" and not database_url:
            raise RuntimeError("DATABASE_URL must be set in production")

        return cls(
            environment=environment,
            database_url=database_url or cls.database_url,
            public_base_url=(os.getenv("PUBLIC_BASE_URL") or "").rstrip("/") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            pool_size=int(os.getenv("DB_POOL_SIZE", 20)),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", 10)),
            pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", 30)),
            pool_recycle=int(os.getenv("DB_POOL_RECYCLE", 1800)),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", 8000)),
        )
