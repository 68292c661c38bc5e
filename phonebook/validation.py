"""
Field checks run before a contact reaches the store.

Every check of every field runs; all failures are reported together.
Phone number uniqueness is left to the database's unique index.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from fastapi import Request

from phonebook.errors import ContactValidationError
from phonebook.models import NAME_MIN_LENGTH, PHONE_NUMBER_PATTERN, ContactFields, ValidationIssue


@dataclass(frozen=True)
class FieldRule:
    path: str
    label: str
    min_length: int | None = None
    pattern: re.Pattern[str] | None = None
    pattern_message: str | None = None


CONTACT_RULES: tuple[FieldRule, ...] = (
    FieldRule("firstName", "First name", min_length=NAME_MIN_LENGTH),
    FieldRule("lastName", "Last name", min_length=NAME_MIN_LENGTH),
    FieldRule("phoneNumber", "Phone number", pattern=PHONE_NUMBER_PATTERN, pattern_message="Invalid phone number format"),
    FieldRule("address", "Address"),
)


def _as_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, (dict, list)):
        return ""
    return str(raw).strip()


def check_contact(body: dict[str, Any]) -> tuple[dict[str, str], list[ValidationIssue]]:
    """Return the trimmed fields and every rule violation found in `body`."""
    values: dict[str, str] = {}
    issues: list[ValidationIssue] = []

    for rule in CONTACT_RULES:
        value = _as_text(body.get(rule.path))
        values[rule.path] = value

        def fail(msg: str) -> None:
            issues.append(ValidationIssue(value=value, msg=msg, path=rule.path))

        if not value:
            fail(f"{rule.label} is required")
        if rule.min_length is not None and len(value) < rule.min_length:
            fail(f"{rule.label} must be at least {rule.min_length} characters long")
        if rule.pattern is not None and not rule.pattern.match(value):
            fail(rule.pattern_message or f"Invalid {rule.label.lower()}")

    return values, issues


async def validate_contact(request: Request) -> ContactFields:
    """FastAPI dependency guarding the create and update handlers."""
    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    values, issues = check_contact(body)
    if issues:
        raise ContactValidationError([i.model_dump() for i in issues])
    return ContactFields(**values)
