"""Public ID generation using ULID."""

import secrets

from ulid import ULID


def new_public_id(prefix: str) -> str:
    """Return a prefixed ULID string, e.g. ``usr_01J5K...``."""
    return f"{prefix}{ULID()}"


def new_access_token() -> str:
    return secrets.token_urlsafe(32)
