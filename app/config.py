import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

from shared.color_math import Calibration

load_dotenv()

STORE_BACKENDS = ("postgres", "memory")


def _list_env(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    store_backend: str = "postgres"
    db_user: str = "postgres"
    db_password: str = "secret"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "color_sensor"
    smoothing_window_size: int = 5
    max_sessions: int = 1000
    calibration: Calibration = field(default_factory=Calibration)
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            store_backend=os.getenv("STORE_BACKEND", "postgres").lower(),
            db_user=os.getenv("DB_USER", "postgres"),
            db_password=os.getenv("DB_PASSWORD", "secret"),
            db_host=os.getenv("DB_HOST", "localhost"),
            db_port=int(os.getenv("DB_PORT", "5432")),
            db_name=os.getenv("DB_NAME", "color_sensor"),
            smoothing_window_size=int(os.getenv("SMOOTHING_WINDOW_SIZE", "5")),
            max_sessions=int(os.getenv("SMOOTHING_MAX_SESSIONS", "1000")),
            calibration=Calibration(
                red=float(os.getenv("CALIBRATION_RED", "1.0")),
                green=float(os.getenv("CALIBRATION_GREEN", "1.0")),
                blue=float(os.getenv("CALIBRATION_BLUE", "1.0")),
            ),
            cors_origins=_list_env("CORS_ORIGINS", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
        if settings.store_backend not in STORE_BACKENDS:
            raise ValueError(f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}")
        if settings.smoothing_window_size < 1:
            raise ValueError("SMOOTHING_WINDOW_SIZE must be at least 1")
        if settings.max_sessions < 1:
            raise ValueError("SMOOTHING_MAX_SESSIONS must be at least 1")
        return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
