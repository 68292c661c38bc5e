"""Application state lookups and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from phonebook.config import Settings
from phonebook.database import ContactStore
from phonebook.metrics import Metrics

logger = logging.getLogger("phonebook")


def get_store(request: Request) -> ContactStore:
    return request.app.state.store


def get_metrics(request: Request) -> Metrics:
    return request.app.state.metrics


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure indexes before serving; close the database client on shutdown."""
    store: ContactStore = app.state.store
    await store.ensure_indexes()
    logger.info("phonebook_started", extra={"service": app.state.settings.service_name})
    yield
    store.close()
    logger.info("phonebook_stopped")
