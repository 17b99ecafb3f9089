"""ULID generation helper utilities."""

from typing import Optional

import ulid


def generate_ulid() -> str:
    """Generate a new ULID string for primary keys."""
    return str(ulid.ULID())


def parse_ulid(ulid_str: str) -> Optional[ulid.ULID]:
    """Parse a ULID string, returning None when it is not a valid ULID."""
    try:
        return ulid.ULID.from_str(ulid_str)
    except (ValueError, TypeError, AttributeError):
        return None


def is_valid_ulid(ulid_str: str) -> bool:
    """Check if a string is a valid ULID (used to vet path parameters)."""
    return parse_ulid(ulid_str) is not None
