"""
Administrator routes. Every route requires a signed-in admin resolved from the
bearer token; request bodies are never trusted for the caller's identity.
"""
from __future__ import annotations

import logging
from typing import List
from uuid import uuid4

from fastapi import APIRouter, Depends

from api.dependencies import get_repository, require_admin_user
from core.logging_config import set_request_id
from repository import CourseRepository
from schemas.api import AdminReviewItem, AdminStatsResponse, AdminUserItem, SuccessResponse, UserIdRequest
from schemas.course import AuthUser
from services import admin_service

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger("api.admin")


@router.get("/stats", response_model=AdminStatsResponse)
async def get_stats(
    admin: AuthUser = Depends(require_admin_user),
    repository: CourseRepository = Depends(get_repository),
):
    set_request_id(str(uuid4()))
    return await admin_service.get_stats(repository)


@router.get("/users", response_model=List[AdminUserItem])
async def get_users(
    admin: AuthUser = Depends(require_admin_user),
    repository: CourseRepository = Depends(get_repository),
):
    set_request_id(str(uuid4()))
    profiles = await admin_service.list_users(repository)
    return [AdminUserItem(**p.model_dump()) for p in profiles]


@router.get("/reviews", response_model=List[AdminReviewItem])
async def get_reviews(
    admin: AuthUser = Depends(require_admin_user),
    repository: CourseRepository = Depends(get_repository),
):
    set_request_id(str(uuid4()))
    return await admin_service.list_reviews(repository)


@router.post("/promote", response_model=SuccessResponse)
async def promote(
    request: UserIdRequest,
    admin: AuthUser = Depends(require_admin_user),
    repository: CourseRepository = Depends(get_repository),
):
    set_request_id(str(uuid4()))
    logger.info("promote_request", extra={"user_id": request.userId})
    await admin_service.set_admin(repository, request.userId, True)
    return SuccessResponse()


@router.post("/revoke", response_model=SuccessResponse)
async def revoke(
    request: UserIdRequest,
    admin: AuthUser = Depends(require_admin_user),
    repository: CourseRepository = Depends(get_repository),
):
    set_request_id(str(uuid4()))
    logger.info("revoke_request", extra={"user_id": request.userId})
    await admin_service.set_admin(repository, request.userId, False)
    return SuccessResponse()


@router.delete("/reviews/{review_id}", response_model=SuccessResponse)
async def delete_review(
    review_id: str,
    admin: AuthUser = Depends(require_admin_user),
    repository: CourseRepository = Depends(get_repository),
):
    set_request_id(str(uuid4()))
    logger.info("delete_review_request", extra={"review_id": review_id, "user_id": admin.id})
    await admin_service.delete_review(repository, review_id)
    return SuccessResponse()


@router.delete("/classes/{course_id}", response_model=SuccessResponse)
async def delete_class(
    course_id: str,
    admin: AuthUser = Depends(require_admin_user),
    repository: CourseRepository = Depends(get_repository),
):
    set_request_id(str(uuid4()))
    logger.info("delete_class_request", extra={"course_id": course_id, "user_id": admin.id})
    await admin_service.delete_course(repository, course_id)
    return SuccessResponse()
