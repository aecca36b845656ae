"""
Administrator capability check and moderation operations.

is_admin() is the only place that decides whether an identity holds admin rights;
routes, the admin dependency and the admin_manage CLI all go through it.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from core.errors import NotFound, PermissionDenied, ValidationError
from repository import CourseRepository
from schemas.api import AdminReviewItem, AdminStatsResponse, ReviewItem
from schemas.course import UserProfile
from services.rating import format_average, summarize

logger = logging.getLogger("admin_service")


async def is_admin(repository: CourseRepository, user_id: Optional[str]) -> bool:
    if not user_id:
        return False
    profile = await repository.get_profile(user_id)
    return bool(profile and profile.is_admin)


async def require_admin(repository: CourseRepository, user_id: Optional[str]) -> None:
    if not await is_admin(repository, user_id):
        raise PermissionDenied()


async def set_admin(repository: CourseRepository, user_id: Optional[str], value: bool) -> None:
    if not user_id:
        raise ValidationError("userId is required")
    updated = await repository.set_admin(user_id, value)
    if not updated:
        raise NotFound("user not found")
    logger.info("admin_changed", extra={"user_id": user_id, "status": value})


async def get_stats(repository: CourseRepository) -> AdminStatsResponse:
    profiles = await repository.list_profiles()
    courses = await repository.list_courses()
    reviews = await repository.list_reviews()
    summary = summarize(reviews)
    return AdminStatsResponse(
        totalUsers=len(profiles),
        adminUsers=sum(1 for p in profiles if p.is_admin),
        totalClasses=len(courses),
        totalReviews=summary.count,
        avgRating=format_average(summary.average),
    )


async def list_users(repository: CourseRepository) -> List[UserProfile]:
    return await repository.list_profiles()


async def list_reviews(repository: CourseRepository) -> List[AdminReviewItem]:
    """All reviews newest first, annotated with class name and author e-mail."""
    reviews = await repository.list_reviews()
    course_names: Dict[str, str] = {c.id: c.name for c in await repository.list_courses()}
    emails: Dict[str, Optional[str]] = {p.id: p.email for p in await repository.list_profiles()}

    items: List[AdminReviewItem] = []
    for review in reviews:
        base = ReviewItem.from_submission(review)
        items.append(
            AdminReviewItem(
                **base.model_dump(),
                class_name=course_names.get(review.course_id or ""),
                author_email=emails.get(review.author_id or ""),
            )
        )
    return items


async def delete_review(repository: CourseRepository, review_id: str) -> None:
    if not await repository.delete_review(review_id):
        raise NotFound("review not found")
    logger.info("review_deleted", extra={"review_id": review_id})


async def delete_course(repository: CourseRepository, course_id: str) -> None:
    if not await repository.delete_course(course_id):
        raise NotFound("class not found")
    logger.info("class_deleted", extra={"course_id": course_id})
