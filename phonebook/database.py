from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING, TEXT, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from phonebook.config import Settings
from phonebook.errors import ConstraintError, NotFoundError, StorageError
from phonebook.models import Contact
from phonebook.validation import check_contact

logger = logging.getLogger("phonebook.db")

T = TypeVar("T")

DUPLICATE_PHONE_MESSAGE = "Phone number already exists"

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean_fields(fields: dict[str, Any]) -> dict[str, str]:
    """
    Trim the editable fields and re-check the contact rules on write.
    Raises ConstraintError mapping each failing field to its first violation.
    """
    cleaned, issues = check_contact(fields)
    violations: dict[str, str] = {}
    for issue in issues:
        violations.setdefault(issue.path, issue.msg)
    if violations:
        detail = ", ".join(f"{k}: {v}" for k, v in violations.items())
        raise ConstraintError(f"Contact validation failed: {detail}", fields=violations)
    return cleaned


def _object_id(contact_id: str) -> ObjectId:
    if not ObjectId.is_valid(contact_id):
        raise NotFoundError()
    return ObjectId(contact_id)


class ContactStore:
    """Persistence gateway for contacts stored in a MongoDB collection."""

    def __init__(self, collection: AsyncIOMotorCollection, client: AsyncIOMotorClient | None = None):
        self.collection = collection
        self.client = client

    async def _call(self, operation: str, aw: Awaitable[T]) -> T:
        """Await a driver call, translating driver errors into contact errors."""
        try:
            return await aw
        except DuplicateKeyError as e:
            logger.info("database_duplicate_key", extra={"operation": operation, "error": str(e)})
            raise ConstraintError(
                f"Contact validation failed: phoneNumber: {DUPLICATE_PHONE_MESSAGE}",
                fields={"phoneNumber": DUPLICATE_PHONE_MESSAGE},
            ) from e
        except PyMongoError as e:
            logger.error("database_error", extra={"operation": operation, "error": str(e)})
            raise StorageError(str(e)) from e

    async def ensure_indexes(self) -> None:
        """Create the unique phone index and the search text index if missing."""
        await self._call(
            "ensure_indexes",
            self.collection.create_index([("phoneNumber", ASCENDING)], unique=True),
        )
        await self._call(
            "ensure_indexes",
            self.collection.create_index(
                [("firstName", TEXT), ("lastName", TEXT), ("phoneNumber", TEXT)]
            ),
        )
        logger.info("database_indexes_ensured", extra={"collection": self.collection.name})

    async def find(
        self,
        filter: dict[str, Any] | None = None,
        *,
        sort: list[tuple[str, int]] | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Contact]:
        cursor = self.collection.find(filter or {}, sort=sort, skip=skip, limit=limit)
        docs = await self._call("find", cursor.to_list(length=None))
        return [Contact.from_document(d) for d in docs]

    async def count(self, filter: dict[str, Any] | None = None) -> int:
        return int(await self._call("count", self.collection.count_documents(filter or {})))

    async def search(self, query: str | None, *, limit: int) -> list[Contact]:
        """Case-insensitive substring match on first name, last name or phone number."""
        pattern = {"$regex": re.escape(query or ""), "$options": "i"}
        return await self.find(
            {"$or": [{"firstName": pattern}, {"lastName": pattern}, {"phoneNumber": pattern}]},
            limit=limit,
        )

    async def insert(self, fields: dict[str, Any]) -> Contact:
        doc: dict[str, Any] = _clean_fields(fields)
        now = _utcnow()
        doc["createdAt"] = now
        doc["updatedAt"] = now
        result = await self._call("insert", self.collection.insert_one(doc))
        doc["_id"] = result.inserted_id
        return Contact.from_document(doc)

    async def update_by_id(self, contact_id: str, fields: dict[str, Any]) -> Contact:
        oid = _object_id(contact_id)
        update = _clean_fields(fields)
        doc = await self._call(
            "update",
            self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": {**update, "updatedAt": _utcnow()}},
                return_document=ReturnDocument.AFTER,
            ),
        )
        if doc is None:
            raise NotFoundError()
        return Contact.from_document(doc)

    async def delete_by_id(self, contact_id: str) -> Contact:
        oid = _object_id(contact_id)
        doc = await self._call("delete", self.collection.find_one_and_delete({"_id": oid}))
        if doc is None:
            raise NotFoundError()
        return Contact.from_document(doc)

    async def ping(self) -> bool:
        if self.client is None:
            return True
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning("database_ping_failed", extra={"error": str(e)})
            return False

    def close(self) -> None:
        if self.client is not None:
            self.client.close()


def create_contact_store(settings: Settings) -> ContactStore:
    client = AsyncIOMotorClient(
        settings.mongodb_uri,
        maxPoolSize=settings.mongodb_max_pool_size,
        serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        tz_aware=True,
    )
    db = client.get_default_database(default=settings.mongodb_db)
    logger.info("database_client_created", extra={"db": db.name, "collection": settings.mongodb_collection})
    return ContactStore(db[settings.mongodb_collection], client=client)
