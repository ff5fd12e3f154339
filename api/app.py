"""
api/app.py
----------
Entry point for the SubKeep HTTP API.

Run with:
    python -m api.app
or behind any ASGI server pointing at `api.app:app`.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.routers.dashboard import router as dashboard_router
from api.routers.simulation import router as simulation_router
from config import API_HOST, API_PORT
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from utils.errors import StoreError, UndoUnavailable, ValidationError
from utils.logger import get_logger, uvicorn_log_config

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database...")
    init_pool()
    create_tables()
    yield
    close_pool()
    logger.info("SubKeep API stopped.")


def create_app(manage_pool: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        manage_pool: Open the database pool on startup and close it on
            shutdown. Tests pass False and inject fake services instead.
    """
    app = FastAPI(
        title="SubKeep API",
        description="Subscription spend simulation: what-if cancellations, additions, apply and undo.",
        version="1.0.0",
        lifespan=lifespan if manage_pool else None,
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": [exc.to_dict()]})

    @app.exception_handler(UndoUnavailable)
    async def undo_unavailable_handler(request: Request, exc: UndoUnavailable):
        return JSONResponse(
            status_code=409,
            content={"detail": {"code": "UNDO_UNAVAILABLE", "reason": exc.reason}},
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    app.include_router(simulation_router, prefix="/simulation", tags=["simulation"])
    app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn."""
    logger.info(f"🚀 SubKeep API listening on {API_HOST}:{API_PORT}")
    uvicorn.run(app, host=API_HOST, port=API_PORT, log_config=uvicorn_log_config())


if __name__ == "__main__":
    run()
