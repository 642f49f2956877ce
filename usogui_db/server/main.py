"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request metrics), exception handlers and monitoring, and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from usogui_db.core.database import init_db
from usogui_db.core.logging_config import get_logger, setup_logging
from usogui_db.core.monitoring import initialize_logfire

from .api.v1 import (
    annotations,
    arcs,
    auth,
    chapters,
    characters,
    events,
    factions,
    gambles,
    guides,
    health,
    media,
    quotes,
    relationships,
    search,
    series,
    tags,
    translations,
    users,
    volumes,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestMetricsMiddleware

# Initialize logging
setup_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates any missing tables on startup. Schema changes are applied with
    Alembic migrations.
    """
    # Startup
    try:
        logger.info("Starting up Usogui DB Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down Usogui DB Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Usogui DB API

    Backend of the Usogui fan database: the series catalogue (volumes, chapters, arcs),
    characters, factions, events and gambles, community guides, quotes and media,
    with spoiler protection based on each reader's progress.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
    expose_headers=cors.expose_headers,
)
app.add_middleware(RequestMetricsMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)


app.include_router(health.router, tags=["health"])

_ROUTERS = [
    ("auth", auth.router),
    ("users", users.router),
    ("series", series.router),
    ("volumes", volumes.router),
    ("chapters", chapters.router),
    ("arcs", arcs.router),
    ("characters", characters.router),
    ("relationships", relationships.router),
    ("factions", factions.router),
    ("tags", tags.router),
    ("events", events.router),
    ("gambles", gambles.router),
    ("guides", guides.router),
    ("quotes", quotes.router),
    ("media", media.router),
    ("annotations", annotations.router),
    ("translations", translations.router),
    ("search", search.router),
]
for name, router in _ROUTERS:
    app.include_router(router, prefix=f"{constant.API_V1_STR}/{name}", tags=[name])
