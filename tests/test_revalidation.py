import asyncio

import pytest
from aiohttp import web

from api.dependencies import get_revalidator
from main import app
from schemas.api import ReviewForm
from schemas.course import AuthUser
from services.revalidation import Revalidator
from services.submission import add_review

from conftest import FakeRepository, serve_app, unused_url


@pytest.mark.asyncio
async def test_without_webhook_only_logs():
    assert await Revalidator().revalidate("/classes/c1") is True


@pytest.mark.asyncio
async def test_posts_path_and_kind_to_webhook():
    received = []

    async def hook(request):
        received.append((await request.json(), request.headers.get("x-revalidate-secret")))
        return web.json_response({"revalidated": True})

    webhook = web.Application()
    webhook.router.add_post("/revalidate", hook)
    async with serve_app(webhook) as url:
        ok = await Revalidator(url=f"{url}/revalidate", secret="s3cret").revalidate("/", kind="layout")

    assert ok is True
    assert received == [({"path": "/", "type": "layout"}, "s3cret")]


@pytest.mark.asyncio
async def test_webhook_error_status_is_reported_not_raised():
    async def hook(request):
        return web.json_response({"message": "boom"}, status=500)

    webhook = web.Application()
    webhook.router.add_post("/revalidate", hook)
    async with serve_app(webhook) as url:
        assert await Revalidator(url=f"{url}/revalidate").revalidate("/") is False


@pytest.mark.asyncio
async def test_dead_webhook_does_not_fail_saved_review():
    repo = FakeRepository()
    revalidator = Revalidator(url=unused_url("/revalidate"), timeout=2)

    submission = await add_review(repo, revalidator, ReviewForm(class_id="c1", body="ok", rating="4"), "u1")

    assert submission.rating == 4
    assert len(repo.inserted_reviews) == 1


@pytest.mark.asyncio
async def test_stalled_webhook_times_out_quietly():
    release = asyncio.Event()

    async def hook(request):
        await release.wait()
        return web.json_response({})

    webhook = web.Application()
    webhook.router.add_post("/revalidate", hook)
    repo = FakeRepository()
    async with serve_app(webhook) as url:
        revalidator = Revalidator(url=f"{url}/revalidate", timeout=0.3)
        try:
            assert await revalidator.revalidate("/classes/c1") is False
            await add_review(repo, revalidator, ReviewForm(class_id="c1", body="ok"), "u1")
        finally:
            release.set()

    assert len(repo.inserted_reviews) == 1


def test_add_review_route_succeeds_when_webhook_is_down(client, repo, current_user):
    current_user.value = AuthUser(id="user-1")
    app.dependency_overrides[get_revalidator] = lambda: Revalidator(url=unused_url("/revalidate"), timeout=2)

    resp = client.post("/actions/add-review", json={"class_id": "class-1", "body": "ok", "rating": "4"})

    assert resp.status_code == 204
    assert len(repo.inserted_reviews) == 1
