import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moodjournal.core.config import get_settings
from moodjournal.core.connectivity import ConnectivityGate, ConnectivityProbe
from moodjournal.core.exceptions import register_exception_handlers
from moodjournal.core.logging_config import setup_logging
from moodjournal.core.middleware import CorrelationIDMiddleware, JWTValidationMiddleware
from moodjournal.core.posthog import init_posthog, shutdown_posthog
from moodjournal.routers import achievements, analytics, entries, health, profile
from moodjournal.services.journal_session import SessionRegistry

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    logger.info("Starting %s...", settings.app_name)
    init_posthog()

    gate = ConnectivityGate()
    app.state.connectivity_gate = gate
    app.state.session_registry = SessionRegistry(gate, idle_seconds=settings.session_idle_seconds)

    probe = ConnectivityProbe(
        gate,
        url=f"{settings.supabase_url}/rest/v1/",
        interval=settings.connectivity_probe_interval_seconds,
        timeout=settings.connectivity_probe_timeout_seconds,
        headers={"apikey": settings.supabase_anon_key},
    )
    probe.start()
    logger.info("Connectivity probe started")
    yield
    logger.info("Shutting down %s...", settings.app_name)
    await probe.stop()
    shutdown_posthog()


app = FastAPI(
    title=settings.app_name,
    description="Personal mood journal API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# JWT validation runs inside the correlation ID scope so auth logs carry the ID
app.add_middleware(JWTValidationMiddleware)
app.add_middleware(CorrelationIDMiddleware)

# Global exception handlers (journal exceptions -> HTTP responses)
register_exception_handlers(app)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(entries.router, prefix=f"{settings.api_prefix}/entries", tags=["Entries"])
app.include_router(analytics.router, prefix=f"{settings.api_prefix}/analytics", tags=["Analytics"])
app.include_router(
    achievements.router, prefix=f"{settings.api_prefix}/achievements", tags=["Achievements"]
)
app.include_router(profile.router, prefix=f"{settings.api_prefix}/profile", tags=["Profile"])
