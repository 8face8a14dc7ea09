"""Application configuration loaded from the environment"""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv(dotenv_path=".env")


# A4 in PDF points
A4_WIDTH = 595.28
A4_HEIGHT = 841.89


@dataclass(frozen=True)
class PdfLayoutConfig:
    """Page geometry and typography used by the PDF exporter"""
    page_width: float = A4_WIDTH
    page_height: float = A4_HEIGHT
    margin: float = 50
    top_y: float = 750
    bottom_threshold: float = 60
    title_font_size: int = 18
    meta_font_size: int = 10
    body_font_size: int = 11
    tags_font_size: int = 10
    line_height: float = 16
    note_spacing: float = 30

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Runtime settings. Passed explicitly into the components that need them."""
    database_url: Optional[str] = None
    supabase_url: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"

    recycle_bin_retention_days: int = 30
    recycle_bin_sweep_interval_hours: float = 24
    enable_recycle_bin_sweeper: bool = True

    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600

    cors_origins: List[str] = ["*"]

    @property
    def recycle_bin_sweep_interval_seconds(self) -> float:
        return self.recycle_bin_sweep_interval_hours * 60 * 60


def load_settings() -> Settings:
    """Build settings from environment variables"""
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        database_url=os.getenv("DATABASE_URL"),
        supabase_url=os.getenv("SUPABASE_URL"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        recycle_bin_retention_days=int(os.getenv("RECYCLE_BIN_RETENTION_DAYS", "30")),
        recycle_bin_sweep_interval_hours=float(os.getenv("RECYCLE_BIN_SWEEP_INTERVAL_HOURS", "24")),
        enable_recycle_bin_sweeper=_env_bool("ENABLE_RECYCLE_BIN_SWEEPER", True),
        db_pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
        db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
        db_pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
        db_pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "3600")),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings (cleared with get_settings.cache_clear() in tests)"""
    return load_settings()
