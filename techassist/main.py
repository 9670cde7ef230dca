import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from techassist.api.errors import register_error_handlers
from techassist.api.health import router as health_router
from techassist.api.query import router as query_router
from techassist.api.search import router as search_router
from techassist.core.config import settings
from techassist.db.database import engine, init_db
from techassist.services.vector_store import init_chromadb
from techassist.utils.logging import get_logger, setup_logging

setup_logging()
logger = get_logger("techassist.main")

# Set tokenizers parallelism if configured (to suppress warnings)
if settings.tokenizers_parallelism:
    os.environ["TOKENIZERS_PARALLELISM"] = settings.tokenizers_parallelism

app = FastAPI(
    title=settings.app_name,
    description="Technical documentation assistant for field technicians",
    version="1.0.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your frontend domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(query_router, prefix="/api/v1")   # /api/v1/rag-query
app.include_router(search_router, prefix="/api/v1")  # /api/v1/search
app.include_router(health_router, prefix="/api")     # /api/health


@app.on_event("startup")
async def on_startup():
    """
    Startup:
    1. Verify the database connection and create tables
    2. Initialize ChromaDB
    """
    logger.info("Starting %s...", settings.app_name)

    logger.info("Initializing database...")
    if not init_db():
        logger.error("Failed to initialize database connection")
        raise RuntimeError("Database initialization failed")

    logger.info("Initializing ChromaDB...")
    if not init_chromadb():
        logger.warning("ChromaDB initialization failed - vector search will fail until it is reachable")
    else:
        logger.info("[OK] ChromaDB ready")

    logger.info("[OK] %s started successfully", settings.app_name)


@app.on_event("shutdown")
async def on_shutdown():
    """Cleanup on shutdown."""
    logger.info("Shutting down %s...", settings.app_name)
    engine.dispose()
    logger.info("[OK] Shutdown complete")
