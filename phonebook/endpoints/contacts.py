"""Contact CRUD endpoints."""

import logging
import math
import re

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from phonebook.config import Settings
from phonebook.database import NEWEST_FIRST, ContactStore
from phonebook.errors import ConstraintError, NotFoundError, StorageError
from phonebook.metrics import Metrics
from phonebook.models import Contact, ContactFields, ContactPage, MessageResponse
from phonebook.state import get_metrics, get_settings, get_store
from phonebook.validation import validate_contact

logger = logging.getLogger("phonebook")

router = APIRouter(prefix="/api/contacts", tags=["contacts"])

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_page(raw: str | None) -> int:
    """
    Read the leading integer of `raw` ("3", "3abc" -> 3).
    Missing, non-numeric, zero and negative values all mean page 1.
    """
    m = _LEADING_INT_RE.match(raw or "")
    if not m:
        return 1
    page = int(m.group(1))
    return page if page >= 1 else 1


def _write_storage_failure(e: StorageError, settings: Settings) -> JSONResponse:
    status = 400 if settings.legacy_write_error_status else e.status_code
    return JSONResponse(status_code=status, content={"error": e.message})


@router.get("", response_model=ContactPage)
async def list_contacts(
    page: str | None = None,
    store: ContactStore = Depends(get_store),
    metrics: Metrics = Depends(get_metrics),
    settings: Settings = Depends(get_settings),
):
    """Newest contacts first, `page_size` per page."""
    current = parse_page(page)
    limit = settings.page_size
    skip = (current - 1) * limit
    try:
        with metrics.time_db("find contacts"):
            total = await store.count()
            # pages past the data (and skips beyond int64) never reach the driver
            contacts = await store.find(sort=NEWEST_FIRST, skip=skip, limit=limit) if skip < total else []
    except StorageError as e:
        logger.error("list_contacts_error", extra={"page": current, "error": e.message})
        raise

    return ContactPage(
        contacts=contacts,
        currentPage=current,
        totalPages=math.ceil(total / limit),
        totalContacts=total,
    )


@router.get("/search", response_model=list[Contact])
async def search_contacts(
    query: str | None = None,
    store: ContactStore = Depends(get_store),
    metrics: Metrics = Depends(get_metrics),
    settings: Settings = Depends(get_settings),
):
    try:
        with metrics.time_db("search contact"):
            return await store.search(query, limit=settings.search_limit)
    except StorageError as e:
        logger.error("search_contacts_error", extra={"query": query, "error": e.message})
        raise


@router.post("", response_model=Contact, status_code=201)
async def add_contact(
    fields: ContactFields = Depends(validate_contact),
    store: ContactStore = Depends(get_store),
    metrics: Metrics = Depends(get_metrics),
    settings: Settings = Depends(get_settings),
):
    try:
        with metrics.time_db("add contacts"):
            contact = await store.insert(fields.model_dump())
    except ConstraintError as e:
        logger.info("add_contact_rejected", extra={"fields": e.fields, "error": e.message})
        raise
    except StorageError as e:
        logger.error("add_contact_error", extra={"error": e.message})
        return _write_storage_failure(e, settings)

    logger.info("contact_created", extra={"contact_id": contact.id})
    return contact


@router.put("/{contact_id}", response_model=Contact)
async def edit_contact(
    contact_id: str,
    fields: ContactFields = Depends(validate_contact),
    store: ContactStore = Depends(get_store),
    metrics: Metrics = Depends(get_metrics),
    settings: Settings = Depends(get_settings),
):
    try:
        with metrics.time_db("edit contact"):
            contact = await store.update_by_id(contact_id, fields.model_dump())
    except NotFoundError:
        logger.info("contact_update_not_found", extra={"contact_id": contact_id})
        raise
    except ConstraintError as e:
        logger.info("edit_contact_rejected", extra={"contact_id": contact_id, "fields": e.fields, "error": e.message})
        raise
    except StorageError as e:
        logger.error("edit_contact_error", extra={"contact_id": contact_id, "error": e.message})
        return _write_storage_failure(e, settings)

    logger.info("contact_updated", extra={"contact_id": contact.id})
    return contact


@router.delete("/{contact_id}", response_model=MessageResponse)
async def delete_contact(
    contact_id: str,
    store: ContactStore = Depends(get_store),
    metrics: Metrics = Depends(get_metrics),
):
    try:
        with metrics.time_db("delete contact"):
            await store.delete_by_id(contact_id)
    except NotFoundError:
        # the contact may already be deleted
        logger.debug("contact_delete_not_found", extra={"contact_id": contact_id})
        raise
    except StorageError as e:
        logger.error("delete_contact_error", extra={"contact_id": contact_id, "error": e.message})
        raise

    logger.info("contact_deleted", extra={"contact_id": contact_id})
    return MessageResponse(message="Contact deleted successfully")
