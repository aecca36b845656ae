"""
FastAPI dependencies shared by the routers.

The Supabase client is created once in main.py's startup hook and kept on app.state;
everything below resolves it per request so tests can swap in fakes through
app.dependency_overrides.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import get_settings
from core.errors import ConfigurationError, Unauthenticated
from repository import CourseRepository
from schemas.course import AuthUser
from services.admin_service import require_admin
from services.revalidation import Revalidator
from services.supabase_client import SupabaseClient

bearer = HTTPBearer(auto_error=False)


def get_supabase_client(request: Request) -> SupabaseClient:
    client = getattr(request.app.state, "supabase", None)
    if client is None:
        raise ConfigurationError()
    return client


def get_repository(client: SupabaseClient = Depends(get_supabase_client)) -> CourseRepository:
    return CourseRepository(client)


def get_revalidator(request: Request) -> Revalidator:
    revalidator = getattr(request.app.state, "revalidator", None)
    return revalidator or Revalidator.from_settings(get_settings())


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    repository: CourseRepository = Depends(get_repository),
) -> Optional[AuthUser]:
    """Resolve the bearer access token to a user; None when absent or rejected."""
    if credentials is None or not credentials.credentials:
        return None
    return await repository.get_user(credentials.credentials)


async def require_user(user: Optional[AuthUser] = Depends(get_current_user)) -> AuthUser:
    if user is None:
        raise Unauthenticated()
    return user


async def require_admin_user(
    user: AuthUser = Depends(require_user),
    repository: CourseRepository = Depends(get_repository),
) -> AuthUser:
    await require_admin(repository, user.id)
    return user
