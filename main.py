# main.py
import logging
import os
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from api import daily, patients, tracker
from api.middleware import ObservabilityMiddleware, get_request_id
from api.rate_limiter import limiter, rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from services.errors import DataAccessError


logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("myayu-api")

API_VERSION = "1.0.0"

# Local frontends; deployments add theirs through CORS_ORIGINS
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://localhost:5173")


def cors_origins() -> List[str]:
    """Built-in origins followed by any extra comma-separated CORS_ORIGINS."""
    origins = list(DEFAULT_CORS_ORIGINS)
    for origin in os.getenv("CORS_ORIGINS", "").split(","):
        origin = origin.strip()
        if origin and origin not in origins:
            origins.append(origin)
    return origins


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Log which Supabase project and key kind the tracker will use. The client
    itself is created on the first request that needs it.
    """
    supabase_url = os.getenv("SUPABASE_URL", "")
    key_kind = "service" if os.getenv("SUPABASE_SERVICE_KEY") else (
        "anon" if os.getenv("SUPABASE_ANON_KEY") else "none"
    )
    logger.info("MyAyu tracker starting: version=%s supabase=%s key=%s",
                API_VERSION, supabase_url or "(not set)", key_kind)
    if key_kind == "none":
        logger.warning("No Supabase key configured; data endpoints will answer 500")

    yield

    logger.info("MyAyu tracker stopped")


app = FastAPI(
    title="MyAyu Tracker API",
    description="Daily wellness tracking for patients, with read-only clinician dashboards.",
    version=API_VERSION,
    lifespan=lifespan
)

app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return rate_limit_exceeded_handler(request, exc)


@app.exception_handler(DataAccessError)
async def data_access_exception_handler(request: Request, exc: DataAccessError):
    """Data access failures that escaped a router's own handling."""
    logger.error(
        "Data access failed: request_id=%s operation=%s",
        get_request_id(request),
        exc.operation,
    )
    return JSONResponse(status_code=500, content={"detail": f"Database error: {exc.operation}"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log the traceback, answer with a message that leaks nothing."""
    logger.exception(
        "Unhandled exception: %s %s request_id=%s",
        request.method,
        request.url,
        get_request_id(request),
        exc_info=True
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


ALLOWED_ORIGINS = cors_origins()
logger.info("CORS allowed origins: %s", ALLOWED_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID", "X-Viewer-Role"],
)

app.add_middleware(ObservabilityMiddleware)

app.include_router(patients.router)
app.include_router(daily.router)
app.include_router(tracker.router)


@app.get("/", tags=["Health"])
def read_root():
    return {"service": "myayu-tracker", "status": "healthy"}


@app.get("/health", tags=["Health"])
def health_check():
    return {"status": "healthy", "version": API_VERSION}
