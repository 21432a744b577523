"""
FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import health, trees
from api.deps import close_registry
from api.errors import (
    APIError,
    api_error_handler,
    generic_error_handler,
    tree_error_handler,
)
from core.schemas.errors import MerkleTreeException


# Configure logging; respects HASHPATH_LOG_LEVEL
def _resolve_log_level() -> int:
    """Resolve log level from env var, defaulting to INFO."""
    raw = os.getenv("HASHPATH_LOG_LEVEL")
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_registry()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="hashpath API",
        description="""
HTTP API for persistent fixed-depth Merkle trees.

## Endpoints

- **POST /trees** - Create a tree, or restore an existing one
- **GET /trees/{name}** - Current root and depth
- **PUT /trees/{name}/leaves/{index}** - Set one 64-byte leaf
- **GET /trees/{name}/hash-path/{index}** - Sibling pairs proving a leaf
- **POST /trees/{name}/verify** - Check a hash path
- **GET /health** - Health check

All hashes are hex strings with a `0x` prefix.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(MerkleTreeException, tree_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(trees.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
