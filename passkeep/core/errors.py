class PassKeepError(Exception):
    """Base class for every error raised by passkeep."""


class ValidationError(PassKeepError, ValueError):
    """A draft field is missing, empty, or otherwise unacceptable."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class GenerationError(PassKeepError):
    """The entropy or clock source could not produce a value."""


class PersistenceError(PassKeepError):
    """Raised by the storage gateway."""


class DuplicateEntryError(PersistenceError):
    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry already exists: {entry_id}")


class EntryNotFoundError(PersistenceError):
    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")
