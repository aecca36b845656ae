"""Sign-in / sign-up routes returning the Supabase session as issued."""
from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, Depends

from api.dependencies import get_repository
from core.config import get_settings
from core.logging_config import set_request_id
from repository import CourseRepository
from schemas.api import CredentialsForm, SessionResponse
from services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _session(payload: dict) -> SessionResponse:
    return SessionResponse(
        access_token=payload.get("access_token"),
        refresh_token=payload.get("refresh_token"),
        token_type=payload.get("token_type") or "bearer",
        expires_in=payload.get("expires_in"),
        # sign-up without e-mail confirmation returns the user object itself
        user=payload.get("user") or ({"id": payload["id"], "email": payload.get("email")} if payload.get("id") else None),
    )


@router.post("/login", response_model=SessionResponse)
async def login(form: CredentialsForm, repository: CourseRepository = Depends(get_repository)):
    set_request_id(str(uuid4()))
    domain = get_settings().university_email_domain
    payload = await auth_service.login(repository, form.email, form.password, domain)
    return _session(payload or {})


@router.post("/signup", response_model=SessionResponse)
async def signup(form: CredentialsForm, repository: CourseRepository = Depends(get_repository)):
    set_request_id(str(uuid4()))
    domain = get_settings().university_email_domain
    payload = await auth_service.signup(repository, form.email, form.password, domain)
    return _session(payload or {})
