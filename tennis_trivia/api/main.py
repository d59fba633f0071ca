"""
Tennis Trivia API Server

FastAPI server for accounts, the tennis catalog, picks, rankings and forums.
"""

from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn
from slowapi import _rate_limit_exceeded_handler  # type: ignore
from slowapi.errors import RateLimitExceeded  # type: ignore

from tennis_trivia.api.routes import router, limiter as routes_limiter
from tennis_trivia.config import get_settings
from tennis_trivia.database import db
from tennis_trivia.database.seed_catalog import seed_catalog
from tennis_trivia.models.schemas import HealthResponse
from tennis_trivia.utils.errors import AppError, UnauthorizedError

settings = get_settings()

# Set up logging
# Allow log level to be configured via environment variable (default: INFO)
numeric_level = getattr(logging, settings.log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    # Startup
    logger.info(f"Starting up Tennis Trivia API ({settings.env})...")

    # Initialize database (create tables if they don't exist)
    # This is a fallback for tables that might not be in migrations yet
    try:
        await db.init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    # Seed tournaments, players and matches
    try:
        await seed_catalog()
        logger.info("Catalog seed data initialized")
    except Exception as e:
        logger.error(f"Failed to seed catalog data: {e}", exc_info=True)

    yield  # App is running

    # Shutdown
    logger.info("Shutting down Tennis Trivia API...")
    await db.engine.dispose()


app = FastAPI(
    title="Tennis Trivia API",
    description="Tennis catalog, personal picks and rankings, and community forums",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup rate limiter
app.state.limiter = routes_limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware - origins configured via ALLOWED_ORIGINS env var
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


def error_body(status_code: int, message: str, code: Optional[str] = None) -> dict:
    """Build the JSON body shared by every error response."""
    body = {
        "statusCode": status_code,
        "error": HTTPStatus(status_code).phrase,
        "message": message,
    }
    if code:
        body["code"] = code
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message, exc.code),
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    message = "; ".join(details) or "Invalid request"
    return JSONResponse(status_code=400, content=error_body(400, message, "VALIDATION_ERROR"))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else HTTPStatus(exc.status_code).phrase
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content=error_body(500, "Internal server error"))


app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Include API routes
app.include_router(router)


@app.get("/health", response_model=HealthResponse)
async def health():
    """Liveness check."""
    return {"ok": True}


def main():
    """Run the server with uvicorn."""
    uvicorn.run(
        "tennis_trivia.api.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
