"""
Public class routes and the form actions posted by the site's pages.

Design choices:
- GET /courses answers with the bare `{"data", "count"}` body the frontend expects and
  never leaks upstream error detail.
- The add-review action resolves identity optionally so that input validation errors
  are reported before a missing login.
"""
from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from api.dependencies import get_current_user, get_repository, get_revalidator
from core.errors import ClassReviewError, NotFound, UpstreamError
from core.logging_config import set_request_id
from repository import CourseRepository
from schemas.api import ClassForm, CourseDetailResponse, CourseSearchItem, CourseSearchResponse, ReviewForm
from schemas.course import AuthUser
from services.course_search import normalize_query, search
from services.rating import summarize
from services.revalidation import Revalidator
from services.submission import add_class, add_review

router = APIRouter(tags=["classes"])
logger = logging.getLogger("api")


@router.get("/courses", response_model=CourseSearchResponse)
async def search_courses(
    q: Optional[str] = Query("", description="Substring matched against class name and teacher"),
    repository: CourseRepository = Depends(get_repository),
):
    """List classes newest first with their average rating, optionally filtered by `q`."""
    req_id = str(uuid4())
    set_request_id(req_id)
    logger.info("course_search_request", extra={"query": normalize_query(q)})

    try:
        courses = await repository.fetch_courses_with_reviews()
    except UpstreamError as e:
        logger.error("course_search_failed", extra={
            "error": e.message,
            "code": e.code,
            "error_type": type(e).__name__,
        })
        return JSONResponse(status_code=500, content={"error": "Failed to search classes"})

    items = [CourseSearchItem.from_rated(rated) for rated in search(courses, q)]
    logger.info("course_search_completed", extra={"count": len(items)})
    return CourseSearchResponse(data=items, count=len(items))


@router.get("/courses/{course_id}", response_model=CourseDetailResponse)
async def get_course(course_id: str, repository: CourseRepository = Depends(get_repository)):
    """Class detail: the class, its reviews newest first and the rating summary."""
    req_id = str(uuid4())
    set_request_id(req_id)
    logger.info("get_course_request", extra={"course_id": course_id})

    course = await repository.get_course(course_id)
    if course is None:
        raise NotFound("class not found")
    reviews = await repository.list_course_reviews(course_id)
    return CourseDetailResponse.build(course, reviews, summarize(reviews))


@router.post("/actions/add-review", status_code=204)
async def post_add_review(
    form: ReviewForm,
    user: Optional[AuthUser] = Depends(get_current_user),
    repository: CourseRepository = Depends(get_repository),
    revalidator: Revalidator = Depends(get_revalidator),
):
    req_id = str(uuid4())
    set_request_id(req_id)
    logger.info("add_review_request", extra={"course_id": form.class_id})

    try:
        await add_review(repository, revalidator, form, user.id if user else None)
    except ClassReviewError as e:
        logger.warning("add_review_failed", extra={"course_id": form.class_id, "error": e.message, "error_type": type(e).__name__})
        raise
    return Response(status_code=204)


@router.post("/actions/add-class", status_code=204)
async def post_add_class(
    form: ClassForm,
    user: Optional[AuthUser] = Depends(get_current_user),
    repository: CourseRepository = Depends(get_repository),
    revalidator: Revalidator = Depends(get_revalidator),
):
    req_id = str(uuid4())
    set_request_id(req_id)
    logger.info("add_class_request")

    try:
        await add_class(repository, revalidator, form, user.id if user else None)
    except ClassReviewError as e:
        logger.warning("add_class_failed", extra={"error": e.message, "error_type": type(e).__name__})
        raise
    return Response(status_code=204)
