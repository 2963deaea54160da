import re
import secrets
import uuid
from typing import Callable

from .errors import GenerationError

ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)


class IdentifierGenerator:
    """
    Random (version 4) UUIDs drawn from the OS CSPRNG.

    `entropy` takes a byte count and returns that many random bytes;
    it defaults to secrets.token_bytes.
    """

    def __init__(self, entropy: Callable[[int], bytes] = secrets.token_bytes):
        self._entropy = entropy

    def generate(self) -> str:
        try:
            raw = self._entropy(16)
        except (OSError, NotImplementedError) as e:
            raise GenerationError(f"Entropy source unavailable: {e}") from e

        if len(raw) != 16:
            raise GenerationError(f"Entropy source returned {len(raw)} bytes, expected 16")

        # version=4 sets the version nibble and the RFC 4122 variant bits
        return str(uuid.UUID(bytes=raw, version=4))


def is_valid_id(value) -> bool:
    return isinstance(value, str) and ID_PATTERN.match(value) is not None


_default = IdentifierGenerator()


def generate_id() -> str:
    return _default.generate()
