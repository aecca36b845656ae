"""
Logging setup for the class review backend.

Every record is written to stdout as one JSON object:

    {"ts": "...", "level": "INFO", "logger": "api", "message": "course_search_completed",
     "request_id": "...", "query": "data", "count": 2}

Event names are the message; context travels in `extra=`. Only the keys listed in
LOG_FIELDS are copied into the line, anything else passed in `extra=` is dropped.

Events emitted by this service:
- api: course_search_request / _completed / _failed, get_course_request,
  add_review_request / _failed, add_class_request / _failed
- api.admin: promote_request, revoke_request, delete_review_request, delete_class_request
- submission: review_added, class_added
- admin_service: admin_changed, review_deleted, class_deleted
- auth_service: login_succeeded / _failed, signup_succeeded / _failed
- revalidation: revalidate, revalidate_rejected, revalidate_failed
- supabase_client: supabase_request_failed, supabase_unreachable
- admin_manage: admin_manage_failed

Routes tag each request with a request id (`set_request_id`); the filter copies it
onto every record logged while that request is being handled.
"""
from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

LOG_FIELDS = (
    # search
    "query",
    "count",
    # entities
    "course_id",
    "review_id",
    "user_id",
    # revalidation
    "path",
    "kind",
    # upstream failures
    "status",
    "code",
    "error",
    "error_type",
)


def set_request_id(request_id: str | None) -> None:
    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    return _request_id_var.get()


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.request_id = get_request_id() or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        line: Dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        line.update({key: getattr(record, key) for key in LOG_FIELDS if hasattr(record, key)})
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        # Review bodies and class names are Japanese; keep them readable
        return json.dumps(line, ensure_ascii=False, default=str)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Route the root, uvicorn and aiohttp loggers through one JSON stdout handler."""
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(level)
    # The Supabase and webhook clients log their own failures
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
