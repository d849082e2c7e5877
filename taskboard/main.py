"""FastAPI application exposing recurring instance generation."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from taskboard import __version__
from taskboard.db.init import init_db
from taskboard.routers import recurring_router
from taskboard.utils.logger import get_logger
from taskboard.utils.metrics import metrics_collector

logger = get_logger("taskboard-api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database tables on startup."""
    try:
        init_db()
    except Exception as e:
        logger.error("Database initialization failed; requests touching the database will fail", error=str(e))
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Taskboard Recurrence API",
        description="Generates instances of recurring tasks for kanban boards",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(recurring_router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint with generation counters."""
        return {"status": "healthy", "version": __version__, "metrics": metrics_collector.get_metrics()}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("taskboard.main:app", host="0.0.0.0", port=8000, reload=True)
