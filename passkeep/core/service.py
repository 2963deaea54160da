from typing import Optional

from .clock import Clock
from .entry import CredentialDraft, CredentialEntry, apply_edit, build, validate
from .errors import EntryNotFoundError
from .ids import IdentifierGenerator
from .logging import logger
from .repository import PersistenceGateway


class EntryService:
    """
    Command layer used by the front-ends.

    The gateway, identifier generator and clock are passed in, so the
    service can run against any store and a controllable clock.
    Persistence errors are never retried here.
    """

    def __init__(
        self,
        repo: PersistenceGateway,
        ids: Optional[IdentifierGenerator] = None,
        clock: Optional[Clock] = None,
    ):
        self.repo = repo
        self.ids = ids or IdentifierGenerator()
        self.clock = clock or Clock()

    def generate_id(self) -> str:
        return self.ids.generate()

    def get_current_time(self) -> str:
        return self.clock.now()

    def create_entry(self, draft: CredentialDraft) -> CredentialEntry:
        # validate before drawing an id or touching the store
        valid = validate(draft)
        entry = build(valid, self.ids.generate(), self.clock.now())
        self.repo.insert(entry)
        logger.info("Entry created entry_id=%s title=%s", entry.id, entry.title)
        return entry

    def edit_entry(self, entry_id: str, draft: CredentialDraft) -> CredentialEntry:
        validate(draft)
        current = self.repo.get(entry_id)
        if current is None:
            logger.warning("Entry edit failed (not found) entry_id=%s", entry_id)
            raise EntryNotFoundError(entry_id)

        # the stored updated_at may come from another clock (earlier CLI
        # run, previous server process); never write a time before it
        timestamp = max(self.clock.now(), current.updated_at)
        edited = apply_edit(current, draft, timestamp)
        self.repo.update(edited)
        logger.info("Entry updated entry_id=%s title=%s", edited.id, edited.title)
        return edited

    def delete_entry(self, entry_id: str) -> None:
        self.repo.delete(entry_id)
        logger.info("Entry deleted entry_id=%s", entry_id)

    def get_entry(self, entry_id: str) -> Optional[CredentialEntry]:
        return self.repo.get(entry_id)

    def list_entries(
        self,
        search: Optional[str] = None,
        sort: str = "created_at",
        order: str = "desc",
    ) -> list[CredentialEntry]:
        entries = self.repo.list(search=search, sort=sort, order=order)
        logger.info("Entries listed count=%s search=%r", len(entries), search)
        return entries
