"""
Credential entries: the draft a user submits and the entry that gets stored.

An entry moves Draft -> Valid -> Persisted -> Edited* -> Deleted. Every step
except deletion goes through validate(). Entries are frozen, so an edit
always produces a new CredentialEntry and a failed edit leaves the old one
exactly as it was.
"""
from dataclasses import asdict, dataclass, replace
from typing import Optional

from .errors import ValidationError

REQUIRED_FIELDS = ("title", "username", "password")
OPTIONAL_FIELDS = ("website", "email")
DRAFT_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS


@dataclass(frozen=True)
class CredentialDraft:
    title: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CredentialDraft":
        return cls(**{f: data.get(f) for f in DRAFT_FIELDS})


@dataclass(frozen=True)
class ValidDraft:
    """A draft that passed validate(). Only validate() should create these."""
    title: str
    username: str
    password: str
    website: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class CredentialEntry:
    id: str
    title: str
    username: str
    password: str
    website: Optional[str]
    email: Optional[str]
    created_at: str
    updated_at: str

    def to_dict(self) -> dict:
        return asdict(self)


def _is_blank(value: str, field: str) -> bool:
    # the password is an opaque secret: whitespace is a legitimate value
    if field == "password":
        return value == ""
    return value.strip() == ""


def validate(draft: CredentialDraft) -> ValidDraft:
    """
    Check a draft field by field and stop at the first problem.
    Raises ValidationError naming the offending field.
    """
    for field in REQUIRED_FIELDS:
        value = getattr(draft, field)
        if value is None:
            raise ValidationError(field, "is required")
        if not isinstance(value, str):
            raise ValidationError(field, "must be a string")
        if _is_blank(value, field):
            raise ValidationError(field, "must not be empty")

    for field in OPTIONAL_FIELDS:
        value = getattr(draft, field)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ValidationError(field, "must be a string")
        if _is_blank(value, field):
            raise ValidationError(field, "must not be empty when given")

    return ValidDraft(
        title=draft.title,
        username=draft.username,
        password=draft.password,
        website=draft.website,
        email=draft.email,
    )


def build(valid: ValidDraft, entry_id: str, timestamp: str) -> CredentialEntry:
    return CredentialEntry(
        id=entry_id,
        title=valid.title,
        username=valid.username,
        password=valid.password,
        website=valid.website,
        email=valid.email,
        created_at=timestamp,
        updated_at=timestamp,
    )


def apply_edit(entry: CredentialEntry, draft: CredentialDraft, timestamp: str) -> CredentialEntry:
    """
    Return a copy of `entry` carrying the fields of `draft`.
    id and created_at are kept; updated_at becomes `timestamp`.
    """
    valid = validate(draft)

    if timestamp < entry.created_at:
        raise ValidationError("updated_at", "must not be earlier than created_at")

    return replace(
        entry,
        title=valid.title,
        username=valid.username,
        password=valid.password,
        website=valid.website,
        email=valid.email,
        updated_at=timestamp,
    )
