"""FastAPI application for the player entry alert service."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from entry_alert.config import get_settings
from entry_alert.errors import EntryAlertError, PlayerNotFoundError, TeamMismatchError
from entry_alert.routes.api import router as api_router
from entry_alert.routes.core import router as core_router
from entry_alert.security import limiter
from entry_alert.state import close_state, get_registry
from entry_alert.telemetry.sentry import init_sentry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking (before FastAPI app creation)
# Only activates if SENTRY_DSN is set in environment
init_sentry()

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(
        f"Starting player entry alert service (sportId={settings.MLB_SPORT_ID}, season={settings.MLB_SEASON})"
    )
    get_registry()
    yield
    logger.info("Shutting down: stopping watchers")
    await close_state()


app = FastAPI(
    title="Player Entry Alert",
    description="Watches a live game and alerts when a player enters",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",") if o.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(EntryAlertError)
async def entry_alert_error_handler(request: Request, exc: EntryAlertError):
    """Map service errors to JSON bodies the web client understands."""
    content = {"error": str(exc), "code": exc.code}
    if isinstance(exc, PlayerNotFoundError):
        content["rawGameState"] = exc.game_state
        content["gameTeams"] = {"home": exc.home, "away": exc.away}
    elif isinstance(exc, TeamMismatchError):
        content["gameTeams"] = {"home": exc.home, "away": exc.away}
    else:
        logger.warning(f"[API] {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=content)


# Include routers
app.include_router(core_router)
app.include_router(api_router)


# =============================================================================
# STATIC UI (React build)
# =============================================================================

_build_path = Path(settings.STATIC_BUILD_DIR)
_index_file = _build_path / "index.html"

if (_build_path / "static").is_dir():
    app.mount("/static", StaticFiles(directory=_build_path / "static"), name="static")


@app.get("/", include_in_schema=False)
async def serve_index():
    if not _index_file.is_file():
        return JSONResponse({"status": "ok", "ui": "not built"})
    return FileResponse(_index_file)


@app.get("/{full_path:path}", include_in_schema=False)
async def serve_spa(full_path: str):
    """Serve build assets, falling back to index.html for client-side routes."""
    if full_path.startswith("api/") or not _index_file.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    candidate = (_build_path / full_path).resolve()
    if candidate.is_file() and _build_path.resolve() in candidate.parents:
        return FileResponse(candidate)
    return FileResponse(_index_file)
