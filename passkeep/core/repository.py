from typing import Optional, Protocol

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .entry import CredentialEntry
from .errors import DuplicateEntryError, EntryNotFoundError, PersistenceError
from .models import PasswordEntryRow

SORT_FIELDS = ("title", "username", "created_at", "updated_at")
SORT_ORDERS = ("asc", "desc")


class PersistenceGateway(Protocol):
    """What the core needs from durable storage."""

    def insert(self, entry: CredentialEntry) -> None: ...

    def update(self, entry: CredentialEntry) -> None: ...

    def delete(self, entry_id: str) -> None: ...

    def get(self, entry_id: str) -> Optional[CredentialEntry]: ...

    def list(
        self,
        search: Optional[str] = None,
        sort: str = "created_at",
        order: str = "desc",
    ) -> list[CredentialEntry]: ...


def _to_entry(row: PasswordEntryRow) -> CredentialEntry:
    return CredentialEntry(
        id=row.id,
        title=row.title,
        username=row.username,
        password=row.password,
        website=row.website,
        email=row.email,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlEntryRepository:
    """
    PersistenceGateway over a SQLAlchemy session.
    Every write is its own transaction; failures roll back before raising.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert(self, entry: CredentialEntry) -> None:
        try:
            self.db.execute(insert(PasswordEntryRow).values(**entry.to_dict()))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEntryError(entry.id) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Insert failed for {entry.id}: {e}") from e

    def update(self, entry: CredentialEntry) -> None:
        values = entry.to_dict()
        del values["id"]
        try:
            result = self.db.execute(
                update(PasswordEntryRow)
                .where(PasswordEntryRow.id == entry.id)
                .values(**values)
            )
            if result.rowcount == 0:
                self.db.rollback()
                raise EntryNotFoundError(entry.id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Update failed for {entry.id}: {e}") from e

    def delete(self, entry_id: str) -> None:
        try:
            result = self.db.execute(
                delete(PasswordEntryRow).where(PasswordEntryRow.id == entry_id)
            )
            if result.rowcount == 0:
                self.db.rollback()
                raise EntryNotFoundError(entry_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Delete failed for {entry_id}: {e}") from e

    def get(self, entry_id: str) -> Optional[CredentialEntry]:
        try:
            row = self.db.execute(
                select(PasswordEntryRow).where(PasswordEntryRow.id == entry_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Lookup failed for {entry_id}: {e}") from e
        return _to_entry(row) if row else None

    def list(
        self,
        search: Optional[str] = None,
        sort: str = "created_at",
        order: str = "desc",
    ) -> list[CredentialEntry]:
        """
        All entries, optionally filtered by a case-insensitive substring
        of title, username, website or email.
        """
        if sort not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {sort}")
        if order not in SORT_ORDERS:
            raise ValueError(f"Unknown sort order: {order}")

        stmt = select(PasswordEntryRow)

        if search:
            escaped = (
                search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            pattern = f"%{escaped}%"
            stmt = stmt.where(
                or_(
                    PasswordEntryRow.title.ilike(pattern, escape="\\"),
                    PasswordEntryRow.username.ilike(pattern, escape="\\"),
                    PasswordEntryRow.website.ilike(pattern, escape="\\"),
                    PasswordEntryRow.email.ilike(pattern, escape="\\"),
                )
            )

        column = getattr(PasswordEntryRow, sort)
        if sort in ("title", "username"):
            column = func.lower(column)
        key = column.asc() if order == "asc" else column.desc()
        stmt = stmt.order_by(key, PasswordEntryRow.id.asc())

        try:
            rows = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Listing entries failed: {e}") from e
        return [_to_entry(r) for r in rows]
