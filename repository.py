"""
Table-level access to classes, reviews and profiles.

Rows come back from Supabase as dicts and are validated into schemas.course models
here so the service layer only ever sees typed records.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from schemas.course import (
    AuthUser,
    CourseRecord,
    CourseWithSubmissions,
    RatingSubmission,
    UserProfile,
    ValidatedCourse,
    ValidatedSubmission,
)
from services.supabase_client import SupabaseClient

CLASSES = "classes"
REVIEWS = "reviews"
PROFILES = "profiles"


class CourseRepository:
    def __init__(self, client: SupabaseClient):
        self.client = client

    # classes
    async def fetch_courses_with_reviews(self) -> List[CourseWithSubmissions]:
        rows = await self.client.select(
            CLASSES,
            "id,name,teacher,created_at,reviews(id,rating)",
            order="created_at",
            descending=True,
        )
        return [CourseWithSubmissions.model_validate(row) for row in rows]

    async def list_courses(self) -> List[CourseRecord]:
        rows = await self.client.select(CLASSES, "id,name,teacher,created_at", order="created_at", descending=True)
        return [CourseRecord.model_validate(row) for row in rows]

    async def get_course(self, course_id: str) -> Optional[CourseRecord]:
        rows = await self.client.select(CLASSES, "*", filters={"id": course_id})
        return CourseRecord.model_validate(rows[0]) if rows else None

    async def insert_course(self, course: ValidatedCourse) -> List[Dict[str, Any]]:
        return await self.client.insert(CLASSES, [course.to_row()])

    async def delete_course(self, course_id: str) -> int:
        # Reviews go first so the foreign key never blocks the class delete
        await self.client.delete(REVIEWS, filters={"class_id": course_id})
        deleted = await self.client.delete(CLASSES, filters={"id": course_id})
        return len(deleted)

    # reviews
    async def list_course_reviews(self, course_id: str) -> List[RatingSubmission]:
        rows = await self.client.select(REVIEWS, "*", filters={"class_id": course_id}, order="created_at", descending=True)
        return [RatingSubmission.model_validate(row) for row in rows]

    async def list_reviews(self) -> List[RatingSubmission]:
        rows = await self.client.select(REVIEWS, "*", order="created_at", descending=True)
        return [RatingSubmission.model_validate(row) for row in rows]

    async def insert_review(self, submission: ValidatedSubmission) -> List[Dict[str, Any]]:
        return await self.client.insert(REVIEWS, [submission.to_row()])

    async def delete_review(self, review_id: str) -> int:
        deleted = await self.client.delete(REVIEWS, filters={"id": review_id})
        return len(deleted)

    # profiles
    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        rows = await self.client.select(PROFILES, "id,email,is_admin,created_at", filters={"id": user_id})
        return UserProfile.model_validate(rows[0]) if rows else None

    async def find_profile_by_email(self, email: str) -> Optional[UserProfile]:
        rows = await self.client.select(PROFILES, "id,email,is_admin,created_at", filters={"email": email})
        return UserProfile.model_validate(rows[0]) if rows else None

    async def list_profiles(self) -> List[UserProfile]:
        rows = await self.client.select(PROFILES, "id,email,is_admin,created_at", order="created_at", descending=True)
        return [UserProfile.model_validate(row) for row in rows]

    async def set_admin(self, user_id: str, is_admin: bool) -> int:
        updated = await self.client.update(PROFILES, {"is_admin": is_admin}, filters={"id": user_id})
        return len(updated)

    # auth
    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        payload = await self.client.get_user(access_token)
        if not payload or not payload.get("id"):
            return None
        return AuthUser.model_validate(payload)

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        return await self.client.sign_in_with_password(email, password)

    async def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        return await self.client.sign_up(email, password)
