"""
API contract schemas for the HTTP boundary.

Notes:
- Search items keep the camelCase keys (`avgRating`, `reviewCount`) the frontend reads.
- Form payloads are deliberately loose (every field an optional string); typing and
  validation happen in one place, services.submission, before any business logic.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from services.rating import format_average

from .course import CourseRecord, RatedCourse, RatingSubmission, RatingSummary


class CourseSearchItem(BaseModel):
    id: str
    name: str
    teacher: Optional[str] = None
    created_at: datetime
    avgRating: Optional[str] = None
    reviewCount: int = 0

    @classmethod
    def from_rated(cls, rated: RatedCourse) -> "CourseSearchItem":
        return cls(
            id=rated.course.id,
            name=rated.course.name,
            teacher=rated.course.instructor,
            created_at=rated.course.created_at,
            avgRating=format_average(rated.summary.average),
            reviewCount=rated.summary.count,
        )


class CourseSearchResponse(BaseModel):
    data: List[CourseSearchItem]
    count: int


class ReviewItem(BaseModel):
    id: Optional[str] = None
    class_id: Optional[str] = None
    body: Optional[str] = None
    rating: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_submission(cls, submission: RatingSubmission) -> "ReviewItem":
        return cls(
            id=submission.id,
            class_id=submission.course_id,
            body=submission.body,
            rating=submission.rating,
            user_id=submission.author_id,
            created_at=submission.created_at,
        )


class CourseDetailResponse(BaseModel):
    id: str
    name: str
    teacher: Optional[str] = None
    created_at: datetime
    avgRating: Optional[str] = None
    reviewCount: int = 0
    reviews: List[ReviewItem] = Field(default_factory=list)

    @classmethod
    def build(
        cls, course: CourseRecord, reviews: List[RatingSubmission], summary: RatingSummary
    ) -> "CourseDetailResponse":
        return cls(
            id=course.id,
            name=course.name,
            teacher=course.instructor,
            created_at=course.created_at,
            avgRating=format_average(summary.average),
            reviewCount=summary.count,
            reviews=[ReviewItem.from_submission(r) for r in reviews],
        )


class ReviewForm(BaseModel):
    """Raw add-review form fields as posted by the page."""

    class_id: Optional[str] = None
    body: Optional[str] = None
    rating: Optional[str] = None

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class ClassForm(BaseModel):
    name: Optional[str] = None
    teacher: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class CredentialsForm(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SessionResponse(BaseModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: Optional[dict] = None


class UserIdRequest(BaseModel):
    userId: Optional[str] = None


class AdminStatsResponse(BaseModel):
    totalUsers: int = 0
    adminUsers: int = 0
    totalClasses: int = 0
    totalReviews: int = 0
    avgRating: Optional[str] = None


class AdminUserItem(BaseModel):
    id: str
    email: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None


class AdminReviewItem(ReviewItem):
    class_name: Optional[str] = None
    author_email: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None
    details: Any = None
