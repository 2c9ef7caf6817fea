"""FastAPI application entry point for the Speaker Bureau back office API."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from speaker_bureau.app.config import get_settings
from speaker_bureau.app.errors import register_error_handlers
from speaker_bureau.infra.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize database on startup."""
    await init_db()
    logger.info("Database initialized")
    yield


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

app = FastAPI(
    title="Speaker Bureau API",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware: allow all origins in debug mode
_cors_origins = settings.cors_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=("*" not in _cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# ---------------------------------------------------------------------------
# Route includes
# ---------------------------------------------------------------------------
from speaker_bureau.app.routes.auth import router as auth_router
from speaker_bureau.app.routes.deals import router as deals_router
from speaker_bureau.app.routes.firm_offers import router as firm_offers_router
from speaker_bureau.app.routes.projects import router as projects_router
from speaker_bureau.app.routes.proposals import public_router as proposal_public_router
from speaker_bureau.app.routes.proposals import router as proposals_router
from speaker_bureau.app.routes.speaker_review import router as speaker_review_router

app.include_router(auth_router)
app.include_router(deals_router)
app.include_router(projects_router)
app.include_router(proposals_router)
app.include_router(proposal_public_router)
app.include_router(firm_offers_router)
app.include_router(speaker_review_router)


@app.get("/health", tags=["health"])
async def health_check():
    """Return service health status."""
    return {"status": "ok", "service": "speaker-bureau"}


def run() -> None:
    """Run the application with uvicorn (used by project.scripts entry point)."""
    uvicorn.run(
        "speaker_bureau.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
