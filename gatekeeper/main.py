from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gatekeeper.api import router
from gatekeeper.auth import AuthError, PasswordHasher, RateLimiter, RateLimits, ReplayGuard, TokenIssuer, TotpEngine
from gatekeeper.config import Settings, load_settings
from gatekeeper.logging import get_logger
from gatekeeper.models import build_engine, build_session_factory

logger = get_logger("http")

CORS_ALLOW_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization"


def create_app(settings: Settings | None = None, rate_limiter: RateLimiter | None = None) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="Gatekeeper API", version="0.1.0")
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_issuer = TokenIssuer(settings.jwt_secret)
    app.state.totp_engine = TotpEngine(
        issuer_name=settings.otp_issuer_name,
        replay_guard=ReplayGuard() if settings.totp_replay_protection else None,
    )
    app.state.password_hasher = PasswordHasher()
    app.state.rate_limiter = rate_limiter or RateLimiter()
    app.state.rate_limits = RateLimits(
        register_max=settings.rate_limit_register_max,
        login_max=settings.rate_limit_login_max,
        window_seconds=settings.rate_limit_window_seconds,
    )

    @app.middleware("http")
    async def cors_and_request_log(request: Request, call_next):
        origin = request.headers.get("origin")
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            logger.info("Request %s %s", request.method, request.url)
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
                response = JSONResponse(status_code=500, content={"error": "Internal server error"})
        if origin and origin in settings.allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
        response.headers["Access-Control-Allow-Credentials"] = "true"
        return response

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)

    @app.get("/health")
    def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.monotonic() - app.state.started_at,
            "environment": settings.app_env,
        }

    app.include_router(router)
    return app
