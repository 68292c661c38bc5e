"""Main FastAPI application for the phonebook service."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from phonebook.config import Settings, load_settings
from phonebook.database import ContactStore, create_contact_store
from phonebook.endpoints.contacts import router as contacts_router
from phonebook.endpoints.system import router as system_router
from phonebook.errors import register_exception_handlers
from phonebook.metrics import HTTPMetricsMiddleware, Metrics
from phonebook.observability import setup_json_logging
from phonebook.state import lifespan

logger = logging.getLogger("phonebook")


def create_app(
    settings: Settings | None = None,
    store: ContactStore | None = None,
    metrics: Metrics | None = None,
) -> FastAPI:
    """Composition root: every shared object is built here and hung on app.state."""
    settings = settings or load_settings()
    setup_json_logging(settings.log_level, settings.service_name)

    metrics = metrics or Metrics()
    store = store or create_contact_store(settings)

    app = FastAPI(title="Phonebook", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.store = store

    # Register exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(system_router)
    app.include_router(contacts_router)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add metrics middleware (outermost)
    app.add_middleware(HTTPMetricsMiddleware, metrics=metrics)
    return app


def main() -> None:
    settings = load_settings()
    setup_json_logging(settings.log_level, settings.service_name)
    logger.info("server_starting", extra={"host": settings.host, "port": settings.port})
    uvicorn.run(
        "phonebook.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
