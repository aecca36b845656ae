"""
Core configuration module for environment variables and settings management.

Design choices:
- Uses python-dotenv to load environment variables from a .env file when present.
- Keeps Settings a plain pydantic BaseModel built by get_settings(), cached with LRU.
- Missing Supabase credentials never stop the process; request handlers raise
  ConfigurationError when they actually need the backend.
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    environment: str = "dev"

    # Supabase project (PostgREST + GoTrue)
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    request_timeout_seconds: float = 10.0

    # Only addresses under this domain may sign in or sign up
    university_email_domain: str = "stu.teikyo-u.ac.jp"

    # Optional frontend on-demand revalidation webhook
    revalidate_url: Optional[str] = None
    revalidate_secret: Optional[str] = None

    cors_origins: List[str] = ["*"]
    api_prefix: str = ""
    log_level: str = "INFO"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load environment variables (from .env if present) and build a Settings object.

    This function is cached so app startup and repeated imports are efficient.
    """
    load_dotenv()  # no-op if .env not present
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        supabase_url=os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL"),
        supabase_service_key=os.getenv("SUPABASE_SERVICE_KEY"),
        request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10")),
        university_email_domain=os.getenv("UNIVERSITY_EMAIL_DOMAIN", "stu.teikyo-u.ac.jp"),
        revalidate_url=os.getenv("REVALIDATE_URL"),
        revalidate_secret=os.getenv("REVALIDATE_SECRET"),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        api_prefix=os.getenv("API_PREFIX", ""),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
