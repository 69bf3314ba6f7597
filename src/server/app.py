"""FastAPI application exposing the template engine over HTTP."""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

# Import from parent directory
sys.path.insert(0, str(Path(__file__).parent.parent))
from config import settings
from engine import SigilEngine
from yaml_loader import SigilDataError


logger = logging.getLogger(__name__)


# Global instances
engine: SigilEngine | None = None


def get_engine() -> SigilEngine:
    """Get the engine instance."""
    global engine
    if engine is None:
        raise RuntimeError("Engine not initialized")
    return engine


def load_engine() -> SigilEngine:
    """Build an engine from the configured data files (empty data if loading fails)."""
    paths = settings.resolve_data_files()
    try:
        return SigilEngine.from_files(paths, settings.engine)
    except SigilDataError as e:
        logger.error(f"Failed to load list data, starting with no tables: {e}")
        return SigilEngine({}, config=settings.engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle app startup and shutdown."""
    global engine

    if settings.engine.debug:
        logging.basicConfig(level=logging.DEBUG)

    engine = load_engine()
    logger.info(f"Loaded {len(engine.lists)} tables and {len(engine.templates)} named templates")

    yield

    engine = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SIGIL Template Engine",
        description="Generate random text from SIGIL templates and list data",
        version="1.0.0",
        lifespan=lifespan,
    )

    from .routes import router
    app.include_router(router)

    return app


# Create the app instance
app = create_app()
