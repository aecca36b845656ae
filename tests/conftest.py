import socket
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest
from aiohttp import web
from fastapi.testclient import TestClient

from api.dependencies import get_current_user, get_repository, get_revalidator
from main import app
from schemas.course import (
    AuthUser,
    CourseRecord,
    CourseWithSubmissions,
    RatingSubmission,
    UserProfile,
    ValidatedCourse,
    ValidatedSubmission,
)

BASE_TIME = datetime(2026, 2, 10, tzinfo=timezone.utc)


def make_course(course_id: str, name: str, teacher: Optional[str] = None, day: int = 0) -> CourseRecord:
    return CourseRecord(id=course_id, name=name, teacher=teacher, created_at=BASE_TIME + timedelta(days=day))


def make_review(review_id: str, course_id: str, rating: Optional[int], body: str = "good", author: str = "user-1") -> RatingSubmission:
    return RatingSubmission(id=review_id, class_id=course_id, body=body, rating=rating, user_id=author, created_at=BASE_TIME)


class FakeRepository:
    """In-memory stand-in for CourseRepository."""

    def __init__(self, courses=None, reviews=None, profiles=None):
        self.courses: List[CourseRecord] = list(courses or [])
        self.reviews: List[RatingSubmission] = list(reviews or [])
        self.profiles: Dict[str, UserProfile] = {p.id: p for p in profiles or []}
        self.inserted_reviews: List[ValidatedSubmission] = []
        self.inserted_courses: List[ValidatedCourse] = []
        self.fetch_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None
        self.sign_in_error: Optional[Exception] = None
        self.sign_in_calls: List[tuple] = []

    async def fetch_courses_with_reviews(self) -> List[CourseWithSubmissions]:
        if self.fetch_error:
            raise self.fetch_error
        return [
            CourseWithSubmissions(
                id=c.id,
                name=c.name,
                teacher=c.instructor,
                created_at=c.created_at,
                reviews=[r for r in self.reviews if r.course_id == c.id],
            )
            for c in self.courses
        ]

    async def list_courses(self) -> List[CourseRecord]:
        return sorted(self.courses, key=lambda c: c.created_at, reverse=True)

    async def get_course(self, course_id: str) -> Optional[CourseRecord]:
        return next((c for c in self.courses if c.id == course_id), None)

    async def insert_course(self, course: ValidatedCourse):
        if self.write_error:
            raise self.write_error
        self.inserted_courses.append(course)
        return [course.to_row()]

    async def delete_course(self, course_id: str) -> int:
        before = len(self.courses)
        self.courses = [c for c in self.courses if c.id != course_id]
        self.reviews = [r for r in self.reviews if r.course_id != course_id]
        return before - len(self.courses)

    async def list_course_reviews(self, course_id: str) -> List[RatingSubmission]:
        return [r for r in self.reviews if r.course_id == course_id]

    async def list_reviews(self) -> List[RatingSubmission]:
        return list(self.reviews)

    async def insert_review(self, submission: ValidatedSubmission):
        if self.write_error:
            raise self.write_error
        self.inserted_reviews.append(submission)
        row = submission.to_row()
        self.reviews.append(
            RatingSubmission(id=f"r{len(self.reviews) + 1}", created_at=datetime.now(timezone.utc), **row)
        )
        return [row]

    async def delete_review(self, review_id: str) -> int:
        before = len(self.reviews)
        self.reviews = [r for r in self.reviews if r.id != review_id]
        return before - len(self.reviews)

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return self.profiles.get(user_id)

    async def find_profile_by_email(self, email: str) -> Optional[UserProfile]:
        return next((p for p in self.profiles.values() if p.email == email), None)

    async def list_profiles(self) -> List[UserProfile]:
        return list(self.profiles.values())

    async def set_admin(self, user_id: str, is_admin: bool) -> int:
        profile = self.profiles.get(user_id)
        if profile is None:
            return 0
        self.profiles[user_id] = profile.model_copy(update={"is_admin": is_admin})
        return 1

    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        return None

    async def sign_in(self, email: str, password: str):
        self.sign_in_calls.append((email, password))
        if self.sign_in_error:
            raise self.sign_in_error
        return {"access_token": "token", "token_type": "bearer", "expires_in": 3600, "user": {"id": "user-1", "email": email}}

    async def sign_up(self, email: str, password: str):
        self.sign_in_calls.append((email, password))
        if self.sign_in_error:
            raise self.sign_in_error
        return {"id": "user-9", "email": email}


class RecordingRevalidator:
    def __init__(self):
        self.calls: List[tuple] = []

    async def revalidate(self, path: str, kind: str = "page") -> bool:
        self.calls.append((path, kind))
        return True


@pytest.fixture
def sample_courses():
    return [
        make_course("class-1", "Programming Basics", "Taro Teikyo", day=0),
        make_course("class-2", "Database Design", "Jiro Yamada", day=1),
    ]


@pytest.fixture
def sample_reviews():
    return [
        make_review("r1", "class-1", 4),
        make_review("r2", "class-1", 5),
        make_review("r3", "class-2", 3),
    ]


@pytest.fixture
def repo(sample_courses, sample_reviews):
    return FakeRepository(
        courses=sample_courses,
        reviews=sample_reviews,
        profiles=[
            UserProfile(id="user-1", email="student@stu.teikyo-u.ac.jp", is_admin=False),
            UserProfile(id="admin-1", email="admin@stu.teikyo-u.ac.jp", is_admin=True),
        ],
    )


@pytest.fixture
def revalidator():
    return RecordingRevalidator()


@pytest.fixture
def current_user():
    """Mutable holder; tests set `.value` to an AuthUser or leave it None."""

    class Holder:
        value: Optional[AuthUser] = None

    return Holder()


@pytest.fixture
def client(repo, revalidator, current_user):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_revalidator] = lambda: revalidator
    app.dependency_overrides[get_current_user] = lambda: current_user.value
    yield TestClient(app)
    app.dependency_overrides.clear()


def unused_url(path: str = "/") -> str:
    """A URL on a local port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}{path}"


@asynccontextmanager
async def serve_app(app: web.Application):
    """Run an aiohttp.web app on a free local port and yield its base URL."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


class CannedBackend:
    """Answers every request from a (method, path) table and records what it received."""

    def __init__(self):
        self.responses: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.requests: List[Dict[str, Any]] = []
        self.url = ""

    def on(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        self.responses[(method, path)] = (status, body)

    async def handle(self, request: web.Request) -> web.Response:
        payload = await request.json() if request.can_read_body else None
        self.requests.append({
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "json": payload,
            "headers": request.headers,
        })
        status, body = self.responses.get((request.method, request.path), (404, {"message": "no canned response"}))
        if body is None:
            return web.Response(status=status)
        return web.json_response(body, status=status)

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self.handle)
        return app
