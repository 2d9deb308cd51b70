"""Common utility functions."""
import re
import time
import uuid
from typing import Optional
from uuid import UUID

# Hyphenated 8-4-4-4-12 or bare 32-digit hex; the forms asyncpg binds
_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}|[0-9a-f]{32}",
    re.IGNORECASE,
)


def generate_uid() -> str:
    """Random 128-bit identifier in canonical UUID text form."""
    return str(uuid.uuid4())


def get_current_timestamp() -> int:
    """Current time in whole seconds since the epoch."""
    return int(time.time())


def is_valid_uuid(uuid_string: Optional[str]) -> bool:
    """Check if string is a UUID in hyphenated or bare hex form."""
    return isinstance(uuid_string, str) and bool(_UUID_PATTERN.fullmatch(uuid_string))


def canonical_uuid(value: str) -> str:
    """Lowercase hyphenated form of a valid UUID; other values unchanged."""
    return str(UUID(value)) if is_valid_uuid(value) else value


def is_missing(value: Optional[str]) -> bool:
    """True for an absent or empty parameter value."""
    return value is None or value == ""
