"""Main FastAPI application for the verifierd daemon.

Wires the verification clients into the HTTP routers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from verifier_library.bootstrap import build_clients
from verifier_library.bootstrap import close_clients
from verifier_library.config.loader import load_config
from verifier_library.verification import VerifierClient

from . import __version__
from .routers import metrics_router
from .routers import status_router
from .routers import verifier_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build verification clients on startup and stop them on shutdown.

    An InitializationError aborts startup. Clients injected through create_app are used as given.

    Args:
        app: FastAPI application instance
    """
    if app.state.clients is not None:
        yield
        return

    # Startup
    config = load_config()
    logging.getLogger().setLevel(config.log_level.upper())
    logger.info(f"Starting verifierd on {config.host}:{config.port}")

    clients = await build_clients(config)
    app.state.clients = clients
    logger.info(f"Serving languages: {', '.join(clients) or 'none'}")

    yield

    # Shutdown
    logger.info("Shutting down verifierd")
    await close_clients(clients)
    app.state.clients = None


def create_app(clients: dict[str, VerifierClient] | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        clients: Pre-built clients per language (built from configuration at
            startup when None)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="verifierd",
        description="Smart-contract source verification service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.clients = clients

    app.include_router(verifier_router)
    app.include_router(status_router)
    app.include_router(metrics_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Service name, version and documentation links."""
        return {
            "name": "verifierd",
            "version": __version__,
            "description": "Smart-contract source verification service",
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    return app


app = create_app()
