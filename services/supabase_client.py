"""
Thin asynchronous client for a hosted Supabase project.

This service provides:
- PostgREST table access (select / insert / update / delete with `eq` filters)
- GoTrue auth calls (resolve an access token, password sign-in, sign-up)
- Uniform error mapping: reads raise UpstreamFetchError, writes raise UpstreamWriteError

One instance is created at application startup and shared through app.state; it owns
a single aiohttp.ClientSession that must be closed on shutdown.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Type

import aiohttp

from core.config import Settings
from core.errors import ConfigurationError, UpstreamError, UpstreamFetchError, UpstreamWriteError

logger = logging.getLogger("supabase_client")


def _eq_params(filters: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    return {column: f"eq.{value}" for column, value in (filters or {}).items()}


def parse_error_payload(payload: Any, status: int) -> Dict[str, Any]:
    """Normalize PostgREST/GoTrue error bodies into message/code/details."""
    if isinstance(payload, dict):
        message = (
            payload.get("message")
            or payload.get("msg")
            or payload.get("error_description")
            or payload.get("error")
        )
        code = payload.get("code") or payload.get("error_code")
        return {
            "message": str(message) if message else f"HTTP {status}",
            "code": str(code) if code is not None else None,
            "details": payload.get("details") or payload.get("hint"),
        }
    if payload:
        return {"message": str(payload), "code": None, "details": None}
    return {"message": f"HTTP {status}", "code": None, "details": None}


class SupabaseClient:
    def __init__(self, url: str, service_key: str, timeout: float = 10.0):
        if not url or not service_key:
            raise ConfigurationError()
        self.base_url = url.rstrip("/")
        self.service_key = service_key
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseClient":
        return cls(
            settings.supabase_url or "",
            settings.supabase_service_key or "",
            timeout=settings.request_timeout_seconds,
        )

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {token or self.service_key}",
            "Content-Type": "application/json",
        }

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: Type[UpstreamError],
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        token: Optional[str] = None,
    ) -> Any:
        session = await self._get_session()
        url = f"{self.base_url}{path}"
        request_headers = self._headers(token)
        request_headers.update(headers or {})
        try:
            async with session.request(method, url, params=params, json=json, headers=request_headers) as response:
                text = await response.text()
                payload: Any = None
                if text:
                    try:
                        payload = await response.json(content_type=None)
                    except ValueError:
                        payload = text
                if response.status >= 400:
                    error = parse_error_payload(payload, response.status)
                    logger.warning(
                        "supabase_request_failed",
                        extra={"path": path, "status": response.status, "code": error["code"]},
                    )
                    raise error_cls(error["message"], code=error["code"], status=response.status, details=error["details"])
                return payload
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("supabase_unreachable", extra={"path": path, "error": str(e), "error_type": type(e).__name__})
            raise error_cls(f"Supabase request failed: {e}") from e

    # ------------------------------------------------------------------
    # PostgREST
    # ------------------------------------------------------------------
    async def select(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        params = {"select": columns}
        params.update(_eq_params(filters))
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        rows = await self._request("GET", f"/rest/v1/{table}", UpstreamFetchError, params=params)
        return rows or []

    async def insert(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        result = await self._request(
            "POST",
            f"/rest/v1/{table}",
            UpstreamWriteError,
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        return result or []

    async def update(self, table: str, values: Dict[str, Any], *, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        result = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            UpstreamWriteError,
            params=_eq_params(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return result or []

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        if not filters:
            # PostgREST refuses unfiltered deletes; fail before the round trip
            raise UpstreamWriteError("refusing to delete without a filter")
        result = await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            UpstreamWriteError,
            params=_eq_params(filters),
            headers={"Prefer": "return=representation"},
        )
        return result or []

    # ------------------------------------------------------------------
    # GoTrue
    # ------------------------------------------------------------------
    async def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        """Resolve an access token to its user, or None when the token is rejected."""
        try:
            return await self._request("GET", "/auth/v1/user", UpstreamFetchError, token=access_token)
        except UpstreamFetchError as e:
            if e.status in (401, 403):
                return None
            raise

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/v1/token",
            UpstreamWriteError,
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    async def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/v1/signup",
            UpstreamWriteError,
            json={"email": email, "password": password},
        )
