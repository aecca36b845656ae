"""
Page cache invalidation for the rendering frontend.

When REVALIDATE_URL is configured each invalidation is POSTed to that webhook
(`{"path": ..., "type": "page" | "layout"}` with an optional shared secret header).
Without a webhook the invalidation is only logged.

Invalidation runs after the write has already been committed, so a failing or slow
webhook is logged and never turned into a failed submission.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp

from core.config import Settings

logger = logging.getLogger("revalidation")


class Revalidator:
    def __init__(self, url: Optional[str] = None, secret: Optional[str] = None, timeout: float = 5.0):
        self.url = url
        self.secret = secret
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Revalidator":
        return cls(settings.revalidate_url, settings.revalidate_secret)

    async def revalidate(self, path: str, kind: str = "page") -> bool:
        """Returns True when the webhook accepted the invalidation (or none is configured)."""
        logger.info("revalidate", extra={"path": path, "kind": kind})
        if not self.url:
            return True

        headers = {"x-revalidate-secret": self.secret} if self.secret else {}
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.url, json={"path": path, "type": kind}, headers=headers) as response:
                    if response.status >= 400:
                        logger.warning("revalidate_rejected", extra={"path": path, "kind": kind, "status": response.status})
                        return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("revalidate_failed", extra={
                "path": path,
                "kind": kind,
                "error": str(e),
                "error_type": type(e).__name__,
            })
            return False
        return True
