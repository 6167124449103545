"""Service for generating review event IDs."""

from ulid import ULID

from mnemo.domain.constants import EVENT_ID_PREFIX


def generate_event_id() -> str:
    """Generate a time-ordered event ID using ULID."""
    return f"{EVENT_ID_PREFIX}{ULID()}"
