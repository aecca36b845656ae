"""
Class and review schemas mirroring the Supabase tables.

Design choices:
- Field names are Pythonic; upstream column names (`teacher`, `class_id`, `user_id`)
  are accepted through aliases so PostgREST rows validate directly.
- `extra="ignore"` keeps validation stable when new columns are added upstream.
- RatingSubmission.rating is stored exactly as received; bounds are enforced by the
  admission policy, not here, so legacy rows still load.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CourseRecord(BaseModel):
    id: str
    name: str = Field(min_length=1)
    instructor: Optional[str] = Field(default=None, alias="teacher")
    created_at: datetime

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class RatingSubmission(BaseModel):
    id: Optional[str] = None
    course_id: Optional[str] = Field(default=None, alias="class_id")
    body: Optional[str] = None
    rating: Optional[int] = None
    # Rows written before author tracking have no user_id
    author_id: Optional[str] = Field(default=None, alias="user_id")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class CourseWithSubmissions(CourseRecord):
    submissions: List[RatingSubmission] = Field(default_factory=list, alias="reviews")


class RatingSummary(BaseModel):
    average: Optional[float] = None
    count: int = 0


class RatedCourse(BaseModel):
    course: CourseRecord
    summary: RatingSummary


class ValidatedSubmission(BaseModel):
    """A submission that passed the admission policy and is ready to insert."""

    course_id: str
    body: str
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    author_id: str

    def to_row(self) -> dict:
        return {
            "class_id": self.course_id,
            "body": self.body,
            "rating": self.rating,
            "user_id": self.author_id,
        }


class ValidatedCourse(BaseModel):
    name: str
    instructor: Optional[str] = None

    def to_row(self) -> dict:
        return {"name": self.name, "teacher": self.instructor}


class UserProfile(BaseModel):
    id: str
    email: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
