from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

NAME_MIN_LENGTH = 2
PHONE_NUMBER_PATTERN = re.compile(r"^\+?[\d\s-]+$", re.ASCII)

# Editable fields in write order; id and timestamps are owned by the store.
CONTACT_FIELDS = ("firstName", "lastName", "phoneNumber", "address")


class ContactFields(BaseModel):
    firstName: str
    lastName: str
    phoneNumber: str
    address: str


class Contact(ContactFields):
    id: str
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Contact":
        return cls(
            id=str(doc["_id"]),
            firstName=doc.get("firstName", ""),
            lastName=doc.get("lastName", ""),
            phoneNumber=doc.get("phoneNumber", ""),
            address=doc.get("address", ""),
            createdAt=doc["createdAt"],
            updatedAt=doc["updatedAt"],
        )


class ContactPage(BaseModel):
    contacts: list[Contact] = Field(default_factory=list)
    currentPage: int
    totalPages: int
    totalContacts: int


class MessageResponse(BaseModel):
    message: str


class ValidationIssue(BaseModel):
    """One entry of the `errors` array returned for a rejected create/update."""

    type: Literal["field"] = "field"
    value: str
    msg: str
    path: str
    location: Literal["body"] = "body"
