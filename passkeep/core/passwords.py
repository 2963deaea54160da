import secrets
import string

DEFAULT_LENGTH = 16
DEFAULT_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"


def generate_password(length: int = DEFAULT_LENGTH, alphabet: str = DEFAULT_ALPHABET) -> str:
    """Random password drawn with the secrets module."""
    if length < 1:
        raise ValueError("Password length must be at least 1")
    if not alphabet:
        raise ValueError("Alphabet must not be empty")
    return "".join(secrets.choice(alphabet) for _ in range(length))
