"""Application factory for the TrueBlazer FastAPI backend."""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_store_settings
from .llm import GatewayClient, get_gateway
from .logging import configure_logging
from .routers import ideas, prompts, workspace
from .store import RowStore, build_store


DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

logger = logging.getLogger(__name__)


def _resolve_allowed_origins() -> list[str]:
    """Return allowed origins, optionally sourced from an env override."""

    raw = os.getenv("TRUEBLAZER_ALLOWED_ORIGINS")
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return DEFAULT_ALLOWED_ORIGINS


def create_app(store: RowStore | None = None, gateway: GatewayClient | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    *store* and *gateway* default to the ones described by the environment.
    """
    configure_logging()
    app = FastAPI(
        title="TrueBlazer Backend",
        version="0.1.0",
        description="Founder-idea fit scoring and context assembly for TrueBlazer.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_resolve_allowed_origins(),
        allow_origin_regex=r"http://localhost:\d+$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.store = store if store is not None else build_store(get_store_settings())
    app.state.gateway = gateway if gateway is not None else get_gateway()
    if app.state.gateway is None:
        logger.warning("No AI gateway key configured; generation endpoints will return 503")

    @app.get("/health")
    async def healthcheck() -> dict[str, str]:
        """Simple health check endpoint."""

        return {"status": "ok"}

    app.include_router(ideas.router)
    app.include_router(prompts.router)
    app.include_router(workspace.router)
    return app
