"""
Workflow Studio - FastAPI Application
Load, edit and publish GitHub Actions workflows as pull requests
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from datetime import datetime, timezone
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.config import settings
from app.core.exceptions import AppError, MalformedInput, RemoteError
from app.core.log_config import configure_logging
from app.core.middleware import BodySizeLimitMiddleware
from app.api.routes import health, workflows, catalog, publish

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    configure_logging(settings.log_level)
    logger.info("Starting %s...", settings.app_name)
    logger.info("API running on %s environment against %s", settings.app_env, settings.github_api_url)
    yield
    logger.info("Shutting down %s...", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Visual GitHub Actions workflow editor backend",
    version="1.0.0",
    lifespan=lifespan,
)

# Innermost layer, so CORS headers are added to its 413 responses.
app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

# Respect forwarded proto/host when running behind a proxy.
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def validation_message(errors: list[dict]) -> str:
    if any(err.get("type") == "json_invalid" for err in errors):
        return "Invalid JSON body"
    missing = [str(err["loc"][-1]) for err in errors if err.get("type") in ("missing", "string_too_short")]
    if missing:
        return f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required"
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ())[1:])
    detail = first.get("msg", "Invalid request")
    return f"{location}: {detail}" if location else detail


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    status_code = exc.status_code
    if isinstance(exc, RemoteError) and status_code < 400:
        status_code = status.HTTP_502_BAD_GATEWAY
    return error_response(status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    malformed = MalformedInput(validation_message(exc.errors()))
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, malformed.message)
    return await handle_app_error(request, malformed)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.get("/")
async def root() -> dict:
    return {
        "name": settings.app_name,
        "environment": settings.app_env,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(health.router, tags=["Health"])
app.include_router(workflows.router, prefix="/workflows", tags=["Workflows"])
app.include_router(catalog.router, tags=["Catalog"])
app.include_router(publish.router, tags=["Publish"])
