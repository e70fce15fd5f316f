from __future__ import annotations

import secrets

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
DEFAULT_LENGTH = 10


def generate_short_id(length: int = DEFAULT_LENGTH) -> str:
    """Return ``length`` characters drawn uniformly from :data:`ALPHABET`.

    Uniqueness is not checked here; the store rejects collisions on insert
    and asks for a fresh identifier.
    """
    if length < 1:
        raise ValueError("Short id length must be a positive integer")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def is_short_id(value: str, length: int | None = None) -> bool:
    if not value:
        return False
    if length is not None and len(value) != length:
        return False
    return all(char in ALPHABET for char in value)


__all__ = ["ALPHABET", "DEFAULT_LENGTH", "generate_short_id", "is_short_id"]
