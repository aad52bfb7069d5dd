"""
Runtime configuration read from the environment.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True, slots=True)
class Settings:
    database_type: str = "sqlite"
    database_path: str = "./data/ledger.db"
    database_url: str | None = None
    db_host: str = "localhost"
    db_port: str = "5432"
    db_name: str = "ledger"
    db_user: str = "postgres"
    db_password: str = "postgres"
    log_level: str = "INFO"
    log_format: str = "console"
    entry_number_prefix: str = "JE"
    entry_number_max_retries: int = 5

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_type=os.getenv("DATABASE_TYPE", "sqlite"),
            database_path=os.getenv("DATABASE_PATH", "./data/ledger.db"),
            database_url=os.getenv("DATABASE_URL") or None,
            db_host=os.getenv("DB_HOST", "localhost"),
            db_port=os.getenv("DB_PORT", "5432"),
            db_name=os.getenv("DB_NAME", "ledger"),
            db_user=os.getenv("DB_USER", "postgres"),
            db_password=os.getenv("DB_PASSWORD", "postgres"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("LOG_FORMAT", "console").lower(),
            entry_number_prefix=os.getenv("ENTRY_NUMBER_PREFIX", "JE"),
            entry_number_max_retries=int(os.getenv("ENTRY_NUMBER_MAX_RETRIES", "5")),
        )

    @property
    def engine_url(self) -> str:
        """Database URL built from the configured backend."""
        if self.database_url:
            return self.database_url
        if self.database_type == "sqlite":
            return f"sqlite:///{self.database_path}"
        elif self.database_type == "postgresql":
            return (
                f"postgresql://{self.db_user}:{self.db_password}"
                f"@{self.db_host}:{self.db_port}/{self.db_name}"
            )
        else:
            raise ValueError(f"Unsupported database type: {self.database_type}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
