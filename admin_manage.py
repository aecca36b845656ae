"""
Administrator management script.

Usage:
    python admin_manage.py list              # list every user, newest first
    python admin_manage.py promote <email>   # grant admin rights
    python admin_manage.py revoke <email>    # remove admin rights

Reads SUPABASE_URL / SUPABASE_SERVICE_KEY from the environment (or .env).
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from core.config import get_settings
from core.errors import ClassReviewError
from core.logging_config import configure_logging
from repository import CourseRepository
from services.admin_service import is_admin, set_admin
from services.supabase_client import SupabaseClient

logger = logging.getLogger("admin_manage")


async def list_users(repository: CourseRepository) -> int:
    users = await repository.list_profiles()
    if not users:
        print("No users found")
        return 0
    for index, user in enumerate(users, start=1):
        badge = "admin" if user.is_admin else "user "
        created = user.created_at.date().isoformat() if user.created_at else "-"
        print(f"{index}. {badge} | {user.email} ({created})")
    return 0


async def change_admin(repository: CourseRepository, email: str, value: bool) -> int:
    profile = await repository.find_profile_by_email(email)
    if profile is None:
        print(f"User not found: {email}", file=sys.stderr)
        return 1
    if await is_admin(repository, profile.id) == value:
        print(f"{email} is already {'an admin' if value else 'not an admin'}")
        return 0
    await set_admin(repository, profile.id, value)
    print(f"{email} {'promoted to admin' if value else 'is no longer an admin'}")
    return 0


async def run(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Manage administrator accounts")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="list all users")
    for name in ("promote", "revoke"):
        p = sub.add_parser(name, help=f"{name} admin rights")
        p.add_argument("email")
    args = parser.parse_args(argv)

    settings = get_settings()
    if not settings.supabase_configured:
        print("SUPABASE_URL or SUPABASE_SERVICE_KEY is not set", file=sys.stderr)
        return 1

    client = SupabaseClient.from_settings(settings)
    repository = CourseRepository(client)
    try:
        if args.command == "list":
            return await list_users(repository)
        return await change_admin(repository, args.email, args.command == "promote")
    except ClassReviewError as e:
        logger.error("admin_manage_failed", extra={"error": e.message, "error_type": type(e).__name__})
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        await client.close()


if __name__ == "__main__":
    configure_logging(logging.WARNING)
    sys.exit(asyncio.run(run()))
