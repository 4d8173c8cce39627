"""
LearnPulse Engagement & Gamification Engine

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from learnpulse.api.middleware.request_id import RequestIdMiddleware
from learnpulse.api.v1 import router as api_v1_router
from learnpulse.config import get_settings
from learnpulse.database import async_session_maker, close_db, init_db
from learnpulse.engines.gamification import seed_badges
from learnpulse.kernel.content import InMemoryContentDirectory
from learnpulse.kernel.errors import AuthError
from learnpulse.kernel.identity import JWTIdentityResolver
from learnpulse.logging_config import configure_logging, get_logger
from learnpulse.schemas.common import HealthResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Startup order: logging, schema, badge catalog, collaborators.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")

    async with async_session_maker() as session:
        await seed_badges(session)
        await session.commit()

    app.state.identity_resolver = JWTIdentityResolver()
    if settings.content_catalog_path:
        app.state.content_directory = InMemoryContentDirectory.from_catalog(settings.content_catalog_path)
    else:
        app.state.content_directory = InMemoryContentDirectory()

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    LearnPulse Engagement & Gamification Engine

    ## Features

    - **Engagement**: active-time samples from the client tracker (sync + unload beacon)
    - **XP**: fixed rewards for logins, first views and completions
    - **Streaks**: consecutive-day login and lesson streaks
    - **Daily Goals**: per-day lesson and login targets, reset lazily
    - **Badges**: criteria-driven achievements, awarded at most once

    ## Invariants

    1. Counters change only through atomic increments
    2. Streak and daily-goal writes are compare-and-swap on the learner version
    3. At most one award per (learner, badge)
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


_cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",  # Vite default
    "http://127.0.0.1:3000",
]

app.add_middleware(RequestIdMiddleware)

# Added last = outermost, so every response gets CORS headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _cors_headers(request: Request) -> dict:
    """CORS headers for error responses; 500s often bypass the CORS middleware."""
    origin = request.headers.get("origin") or ""
    allow_origin = origin if origin in _cors_origins else _cors_origins[0]
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "*",
        "Access-Control-Allow-Headers": "*",
    }


def _error_headers(request: Request, extra: dict = None) -> dict:
    headers = _cors_headers(request)
    if extra:
        headers.update(extra)
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers["X-Request-ID"] = req_id
    return headers


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Ensure 401/403/404 etc. responses have CORS headers."""
    req_id = getattr(request.state, "request_id", None)
    content = {"detail": exc.detail}
    if req_id and exc.status_code >= 500:
        content["request_id"] = req_id
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=_error_headers(request, getattr(exc, "headers", None)),
    )


@app.exception_handler(AuthError)
async def auth_exception_handler(request: Request, exc: AuthError):
    """An AuthError escaping a route is a 401 with no side effects."""
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": "Unauthorized"},
        headers=_error_headers(request, {"WWW-Authenticate": "Bearer"}),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    content = {"detail": "Validation error", "errors": errors}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        content["request_id"] = req_id
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=content,
        headers=_error_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    req_id = getattr(request.state, "request_id", None)
    if settings.debug:
        content = {
            "detail": str(exc),
            "type": type(exc).__name__,
            "request_id": req_id,
        }
    else:
        content = {"detail": "Internal server error", "request_id": req_id}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_error_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(status="ok", version=settings.version, database="connected")


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": {
            "v1": settings.api_v1_prefix,
        },
    }


app.include_router(
    api_v1_router,
    prefix=settings.api_v1_prefix,
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "learnpulse.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
