"""sprintledger - sprint estimation ledger and burndown service."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.core.db_client import close_connection, init_db
from src.core.errors import TaskRejectedError
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.task_router import handle_task_rejected, router as task_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Configure logging first so startup logs are captured
    configure_logfire()

    await init_db()
    logger.info("Database initialized")

    yield

    await close_connection()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="sprintledger",
    description="Sprint estimation ledger, workflow gates and burndown projection",
    version="0.1.0",
    lifespan=lifespan,
)

instrument_fastapi(app)

app.add_exception_handler(TaskRejectedError, handle_task_rejected)
app.include_router(task_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
