"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from .._version import __version__
from ..core.mirror import MetadataMirror
from .routes import router

if TYPE_CHECKING:
    from ..interfaces.mirror import MetadataStore
    from ..utils.health import HealthChecker


def create_app(store: MetadataStore, health_checker: HealthChecker | None = None) -> FastAPI:
    """Create the HTTP app serving the metadata endpoints.

    Args:
        store: Metadata store the endpoints pin to.
        health_checker: Checker behind ``GET /api/health``. If None, the
            endpoint reports an unknown status.
    """
    app = FastAPI(title="Civic Ledger", version=__version__)
    app.state.mirror = MetadataMirror(store)
    app.state.health_checker = health_checker
    app.include_router(router)
    return app
