# access_console/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers, state lifecycle, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from access_console.routers import access, logs, session, health
from access_console.database import SessionLocal, create_tables
from access_console.config import settings
from access_console.errors import AccessConsoleError, AuthMissingError
from access_console.services.authorization import SIGN_IN_PAGE
from access_console.services.state_store import state_store
from access_console.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Factory Access Console API",
    description="Supplier & personnel presence, check-in / check-out, entry/exit logs.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the console front-end to call the API) ──────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the console origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key for the console endpoints.
    Health check and docs stay open. Set API_KEY in .env, leave empty to disable.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(AccessConsoleError)
async def access_console_error_handler(request: Request, exc: AccessConsoleError):
    logger.warning(f"{request.method} {request.url.path} refused: {exc.message}")
    content = {"detail": exc.message, "error": type(exc).__name__}
    if isinstance(exc, AuthMissingError):
        content["redirect"] = SIGN_IN_PAGE
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(access.router,  prefix="/api/v1", tags=["🚪 Provide Access"])
app.include_router(logs.router,    prefix="/api/v1", tags=["📋 Logs"])
app.include_router(session.router, prefix="/api/v1", tags=["🔑 Session"])
app.include_router(health.router,  prefix="/api/v1", tags=["💚 Health"])


# ── Startup / Shutdown ───────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Access Console starting up...")
    create_tables()
    db = SessionLocal()
    try:
        state_store.load(db)
    finally:
        db.close()
    logger.info("✅ Application state loaded")
    logger.info(f"📡 Backend API: {settings.BACKEND_API_URL}")
    logger.info(f"🌐 Listening on http://{settings.CONSOLE_HOST}:{settings.CONSOLE_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Access Console shutting down...")
    db = SessionLocal()
    try:
        state_store.save(db)
    finally:
        db.close()
