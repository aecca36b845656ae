"""
Admission policy and actions for user submissions (reviews and classes).

Raw form values are parsed and validated here in a single step; nothing is written
upstream unless validation and identity checks have both passed.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from core.errors import EmptyBody, InvalidRating, MissingCourseReference, Unauthenticated, ValidationError
from repository import CourseRepository
from schemas.api import ClassForm, ReviewForm
from schemas.course import ValidatedCourse, ValidatedSubmission
from services.revalidation import Revalidator

logger = logging.getLogger("submission")


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def parse_rating(rating: Any) -> Optional[int]:
    """Coerce a form rating to an int in 1..5; None/"" mean "no rating"."""
    if rating is None:
        return None
    if isinstance(rating, bool):
        raise InvalidRating()
    if isinstance(rating, int):
        value = rating
    else:
        text = str(rating).strip()
        if not text:
            return None
        try:
            value = int(text)
        except ValueError:
            raise InvalidRating() from None
    if not 1 <= value <= 5:
        raise InvalidRating()
    return value


def validate_submission(
    course_id: Optional[str],
    body: Optional[str],
    rating: Any = None,
    author_id: Optional[str] = None,
) -> ValidatedSubmission:
    if _blank(course_id):
        raise MissingCourseReference()
    if _blank(body):
        raise EmptyBody()
    if not author_id:
        raise Unauthenticated()
    return ValidatedSubmission(
        course_id=str(course_id).strip(),
        body=body,
        rating=parse_rating(rating),
        author_id=author_id,
    )


def validate_course(name: Optional[str], instructor: Optional[str] = None) -> ValidatedCourse:
    if _blank(name):
        raise ValidationError("class name is required")
    return ValidatedCourse(
        name=name.strip(),
        instructor=None if _blank(instructor) else instructor.strip(),
    )


async def add_review(
    repository: CourseRepository,
    revalidator: Revalidator,
    form: ReviewForm,
    author_id: Optional[str],
) -> ValidatedSubmission:
    submission = validate_submission(form.class_id, form.body, form.rating, author_id)
    # Upstream write errors propagate unchanged
    await repository.insert_review(submission)
    logger.info("review_added", extra={"course_id": submission.course_id, "user_id": author_id})

    await revalidator.revalidate(f"/classes/{submission.course_id}")
    await revalidator.revalidate("/", kind="layout")
    return submission


async def add_class(
    repository: CourseRepository,
    revalidator: Revalidator,
    form: ClassForm,
    author_id: Optional[str],
) -> ValidatedCourse:
    course = validate_course(form.name, form.teacher)
    if not author_id:
        raise Unauthenticated()
    await repository.insert_course(course)
    logger.info("class_added", extra={"user_id": author_id})

    await revalidator.revalidate("/")
    return course
