"""ImpulseLab Backend: FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import settings
from backend.middleware.rate_limit import RateLimitMiddleware
from backend.routes import explain, sessions, simulation

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    from backend.services.explainer import WaveformExplainer
    from backend.session.controller import SimulationController
    from backend.session.store import InMemorySessionStore

    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY not set; explanation routes will fail")

    explainer = WaveformExplainer(settings.anthropic_api_key, settings.explainer)
    store = InMemorySessionStore(ttl_hours=settings.session_ttl_hours)
    app.state.explainer = explainer
    app.state.session_store = store
    app.state.controller = SimulationController(
        store,
        explainer=explainer,
        debounce_seconds=settings.simulation_debounce_seconds,
    )
    yield


app = FastAPI(
    title="ImpulseLab API",
    description="Marx impulse generator waveform simulation",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow frontend origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url] if settings.frontend_url else [],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    RateLimitMiddleware,
    requests_per_minute=settings.requests_per_minute,
    ai_requests_per_minute=settings.ai_requests_per_minute,
)

# Register route modules
app.include_router(simulation.router, prefix="/api", tags=["Simulation"])
app.include_router(explain.router, prefix="/api", tags=["Explanation"])
app.include_router(sessions.router, prefix="/api", tags=["Sessions"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "impulselab-backend"}
