"""
Sign-in and sign-up on top of Supabase GoTrue.

Only university addresses are accepted. A bare username gets the university domain
appended; any other domain is rejected before the upstream call. Upstream auth
messages are mapped to user-facing text where a known phrase is recognised.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from core.errors import UpstreamError, ValidationError
from repository import CourseRepository

logger = logging.getLogger("auth_service")

MIN_PASSWORD_LENGTH = 6

_AUTH_ERROR_MESSAGES = {
    "rate limit": "Too many e-mails sent. Please wait a while and try again.",
    "invalid login credentials": "The e-mail address or password is incorrect.",
    "user already registered": "This e-mail address is already registered.",
    "email not confirmed": "Please confirm your e-mail address using the message sent at sign-up.",
    "invalid email": "The e-mail address is not valid.",
    "weak password": "The password does not meet the security requirements. Please choose a stronger one.",
    "user not found": "This e-mail address is not registered.",
}


class AuthError(ValidationError):
    """Sign-in or sign-up was rejected; message is safe to show the user."""


def translate_auth_error(message: Optional[str]) -> str:
    if not message:
        return "An unexpected error occurred."
    lowered = message.lower()
    for phrase, friendly in _AUTH_ERROR_MESSAGES.items():
        if phrase in lowered:
            return friendly
    return message


def _is_rejection(error: UpstreamError) -> bool:
    return error.status is not None and 400 <= error.status < 500


def normalize_email(email: Optional[str], domain: str) -> str:
    email = (email or "").strip()
    if not email:
        raise AuthError("Please enter your e-mail address.")
    if "@" not in email:
        return f"{email}@{domain}"
    if not email.lower().endswith(f"@{domain.lower()}"):
        raise AuthError(f"Please use your university e-mail address (@{domain}).")
    return email


async def login(repository: CourseRepository, email: Optional[str], password: Optional[str], domain: str) -> Dict[str, Any]:
    address = normalize_email(email, domain)
    try:
        session = await repository.sign_in(address, password or "")
    except UpstreamError as e:
        if not _is_rejection(e):
            raise
        logger.info("login_failed", extra={"code": e.code, "status": e.status})
        raise AuthError(translate_auth_error(e.message)) from e
    logger.info("login_succeeded")
    return session


async def signup(repository: CourseRepository, email: Optional[str], password: Optional[str], domain: str) -> Dict[str, Any]:
    address = normalize_email(email, domain)
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    try:
        session = await repository.sign_up(address, password)
    except UpstreamError as e:
        if not _is_rejection(e):
            raise
        logger.info("signup_failed", extra={"code": e.code, "status": e.status})
        raise AuthError(translate_auth_error(e.message)) from e
    logger.info("signup_succeeded")
    return session
