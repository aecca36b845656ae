"""
Application entry point for the class review backend.

Design choices:
- The Supabase client is constructed once on startup and kept on app.state; routes
  receive it through dependencies instead of importing a module-level singleton.
- Missing Supabase settings do not prevent startup; requests that need the backend
  answer 500 "Server configuration error" instead.
- Errors from the service layer are mapped to `{"error": ...}` bodies here, in one place.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.admin_routes import router as admin_router
from api.auth_routes import router as auth_router
from api.routes import router as class_router
from core.config import get_settings
from core.errors import ClassReviewError, UpstreamError
from core.logging_config import configure_logging
from services.revalidation import Revalidator
from services.supabase_client import SupabaseClient

_settings = get_settings()

# Configure structured logging
configure_logging(_settings.log_level)
logger = logging.getLogger("startup")

app = FastAPI(title="Class Review - Backend", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    # Form actions hand the upstream error back as-is
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "code": exc.code, "details": exc.details})


@app.exception_handler(ClassReviewError)
async def class_review_error_handler(request: Request, exc: ClassReviewError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    # Malformed form payloads get the same 400 {"error": ...} shape as admission failures
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=400, content={"error": "invalid input"})
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid input")
    return JSONResponse(status_code=400, content={"error": f"{field}: {message}" if field else message})


@app.get("/")
async def root():
    return {"message": "Server running"}


app.include_router(class_router, prefix=_settings.api_prefix)
app.include_router(auth_router, prefix=_settings.api_prefix)
app.include_router(admin_router, prefix=_settings.api_prefix)


@app.on_event("startup")
async def startup_event():
    """Create the shared Supabase client and revalidator."""
    app.state.revalidator = Revalidator.from_settings(_settings)
    if not _settings.supabase_configured:
        app.state.supabase = None
        logger.error("Supabase URL or service key is not set; data routes will answer 500")
        return
    app.state.supabase = SupabaseClient.from_settings(_settings)
    logger.info("Supabase client initialised")


@app.on_event("shutdown")
async def shutdown_event():
    client = getattr(app.state, "supabase", None)
    if client is not None:
        await client.close()
