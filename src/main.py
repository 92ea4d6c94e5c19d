import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.routes import router
from src.core.config import CONFIG
from src.core.exceptions import (
    ChainConflictError,
    CorruptedGameError,
    GameError,
    RepositoryError,
)
from src.db.database import init_db

logging.basicConfig(level=CONFIG.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables before serving the first request."""
    init_db()
    logger.info("Start Server")
    try:
        yield
    finally:
        logger.info("Stop Server")


app = FastAPI(title="Tank Tactics", lifespan=lifespan)
app.include_router(router)


@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError) -> JSONResponse:
    """Rule violations are the client's fault, unless the stored records no longer make sense."""
    if isinstance(exc, CorruptedGameError):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    elif isinstance(exc, ChainConflictError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, RepositoryError):
        status_code = status.HTTP_404_NOT_FOUND
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )
