"""
Lead Intake Platform API - Main Application.

FastAPI application serving the chatbot widget: lead scoring, lead intake,
appointment booking and the contact form.
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.dependencies import get_settings
from config.logging_config import configure_logging, set_request_id
from config.settings import settings_from_env

# CORS and log level are read before settings are validated so that importing
# the app never requires store credentials.
_startup_env = settings_from_env()
configure_logging(_startup_env.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fail fast on bad configuration.
    app.dependency_overrides.get(get_settings, get_settings)()
    yield


# Create FastAPI application
app = FastAPI(
    title="Lead Intake Platform API",
    description="Lead scoring, intake and appointment booking for the advisor chatbot",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_startup_env.cors_origins),
    allow_credentials="*" not in _startup_env.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Tag logs for this request with an id and echo it as X-Request-ID."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "lead-intake-platform-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Lead Intake Platform API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import bookings, contact, leads

app.include_router(leads.router, prefix="/api", tags=["Leads"])
app.include_router(bookings.router, prefix="/api", tags=["Bookings"])
app.include_router(contact.router, prefix="/api", tags=["Contact"])
