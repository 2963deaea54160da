import re
import threading
from datetime import datetime, timezone
from typing import Callable

from .errors import GenerationError

TIMESTAMP_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{6}\+00:00$"
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    """
    Parse a canonical timestamp (UTC, +00:00 offset, microseconds).
    Raises ValueError for anything else.
    """
    if not isinstance(value, str) or not TIMESTAMP_PATTERN.match(value):
        raise ValueError(f"Not a canonical timestamp: {value!r}")
    return datetime.fromisoformat(value)


class Clock:
    """
    Current time as canonical, string-sortable timestamps.

    The clock never goes backwards: if the source reports an instant
    earlier than the last one emitted (e.g. after an NTP correction),
    the last emitted value is returned again.
    """

    def __init__(self, source: Callable[[], datetime] = _utc_now):
        self._source = source
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> str:
        try:
            current = self._source()
        except (OSError, OverflowError) as e:
            raise GenerationError(f"Clock source unavailable: {e}") from e

        if current.tzinfo is None:
            raise GenerationError("Clock source returned a naive datetime")
        current = current.astimezone(timezone.utc)

        with self._lock:
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current

        return format_timestamp(current)


_default = Clock()


def get_current_time() -> str:
    return _default.now()
