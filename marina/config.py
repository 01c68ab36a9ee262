"""Settings read from the environment."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field

from marina.domain.errors import ConfigurationError
from marina.repos.memory import create_record_store
from marina.repos.postgrest import PostgRESTRecordStore
from marina.repos.store import RecordStore

StoreBackend = Literal["memory", "postgrest"]


class Settings(BaseModel):
    store_backend: StoreBackend = "memory"
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    store_http_timeout: float = Field(default=30, gt=0)
    log_level: str = "INFO"
    seed_data: bool = False


def load_settings() -> Settings:
    """Build settings from MARINA_*, SUPABASE_* and LOG_LEVEL variables."""
    return Settings(
        store_backend=os.environ.get("MARINA_STORE_BACKEND", "memory"),
        supabase_url=os.environ.get("SUPABASE_URL") or None,
        supabase_anon_key=os.environ.get("SUPABASE_ANON_KEY") or None,
        store_http_timeout=float(os.environ.get("STORE_HTTP_TIMEOUT", "30")),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        seed_data=os.environ.get("MARINA_SEED_DATA", "") in ("1", "true", "yes"),
    )


def build_store(settings: Settings) -> RecordStore:
    """Create the record store selected by *settings*."""
    if settings.store_backend == "postgrest":
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise ConfigurationError(
                "Supabase URL or anon key is missing. Set SUPABASE_URL and "
                "SUPABASE_ANON_KEY, or use MARINA_STORE_BACKEND=memory."
            )
        return PostgRESTRecordStore(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=settings.store_http_timeout,
        )
    return create_record_store(seed=settings.seed_data)
