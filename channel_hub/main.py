"""
FastAPI application entry point for the Channel Hub API.

Configures logging and CORS, registers the API routers, and manages the
database pool over the application lifespan.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from channel_hub import __version__
from channel_hub.api import api_router
from channel_hub.api.validation import MISSING_PARAMETERS_DETAIL, VALIDATE_OVERLAP_PATH
from channel_hub.core.config import get_settings
from channel_hub.core.database import init_db, close_db


settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the database pool on startup and close it on shutdown.

    A failed pool initialization is logged and startup continues; endpoints
    that need the database retry the connection lazily.
    """
    logger.info(f"Channel Hub API starting (overlap strategy: {settings.overlap_strategy})")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    yield

    logger.info("Channel Hub API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


app = FastAPI(
    title="Channel Hub API",
    version=__version__,
    description=(
        "Backend for the sales and marketing dashboard's channel management: "
        "UTM sub-channel overlap validation and the sub-channel directory."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Answer malformed request bodies with 400 instead of FastAPI's default 422.

    The overlap endpoint keeps its fixed detail message; other routes get the
    pydantic error list.
    """
    logger.warning(f"Rejected malformed request to {request.url.path}: {exc.errors()}")

    if request.url.path == VALIDATE_OVERLAP_PATH:
        return JSONResponse(status_code=400, content={"detail": MISSING_PARAMETERS_DETAIL})
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring and load balancer probes."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """API name, version and documentation links."""
    return {
        "name": "Channel Hub API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "channel_hub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
