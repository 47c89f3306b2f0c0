"""
Main entry point for the CRM FastAPI server.

This module defines the FastAPI application, its routers and lifecycle
management. It relies on environment variables for configuration
(e.g., HOST, FAST_API_PORT, CRM_DATA_DIR); see app/Core/Config/server.py.
"""

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.Core.Exceptions.handlers import register_exception_handlers
from app.dependencies import get_customer_repository, get_lead_repository, server_config
from app.Http.Routes.crm_import import router as crm_import_router
from app.Http.Routes.customers import router as customers_router

# Configure loguru
logger.remove()
logger.add(
    sys.stderr,
    level=server_config.log_level,
    format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    enqueue=True,
    backtrace=True,
    diagnose=False,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Opens the customer and lead stores on startup so a corrupt data file
    fails the boot instead of the first request.
    """
    get_customer_repository()
    get_lead_repository()
    logger.info(f"CRM data directory: {server_config.data_dir}")
    yield
    logger.info("CRM API shutting down")


app: FastAPI = FastAPI(
    lifespan=lifespan,
    title="CRM Customer API",
    description="Customer import, deduplication and management for the CRM panel.",
    version="1.0.0",
)

# Register custom exception handlers for standardized error responses
register_exception_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(crm_import_router)
app.include_router(customers_router)


@app.get("/health", tags=["System"], summary="Health check")
async def health():
    return {"status": "ok"}


def parse_server_args(argv=None):
    """Parse server-specific arguments, overriding the environment config."""
    import argparse

    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--host", help="Server host")
    parser.add_argument("--port", type=int, help="Server port")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    server_args, _ = parser.parse_known_args(argv)

    if server_args.host:
        server_config.host = server_args.host
    if server_args.port:
        server_config.port = server_args.port
    if server_args.reload:
        server_config.reload = server_args.reload


if __name__ == "__main__":
    import uvicorn

    parse_server_args()
    logger.info("Starting FastAPI server")
    uvicorn.run(
        "main:app",
        host=server_config.host,
        port=server_config.port,
        reload=server_config.reload,
    )
