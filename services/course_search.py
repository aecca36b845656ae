"""
Class search: substring filtering on name/instructor plus rating annotation.

Results are always newest first. An empty or whitespace-only query returns every
class. Matching is plain case-insensitive containment, not tokenized search.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from schemas.course import CourseRecord, CourseWithSubmissions, RatedCourse
from services.rating import summarize

logger = logging.getLogger("course_search")


def normalize_query(query: Optional[str]) -> str:
    return (query or "").strip()


def matches(course: CourseRecord, needle: str) -> bool:
    """`needle` must already be casefolded."""
    if needle in course.name.casefold():
        return True
    return bool(course.instructor) and needle in course.instructor.casefold()


def search(courses: Sequence[CourseWithSubmissions], query: Optional[str]) -> List[RatedCourse]:
    needle = normalize_query(query).casefold()
    selected = [c for c in courses if not needle or matches(c, needle)]
    # sorted() is stable and leaves the caller's sequence untouched
    ordered = sorted(selected, key=lambda c: c.created_at, reverse=True)

    results: List[RatedCourse] = []
    for course in ordered:
        record = CourseRecord(
            id=course.id, name=course.name, instructor=course.instructor, created_at=course.created_at
        )
        results.append(RatedCourse(course=record, summary=summarize(course.submissions)))

    logger.debug("search filtered %d of %d classes", len(results), len(courses))
    return results
