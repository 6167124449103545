"""
Exception hierarchy for mnemo.

The scheduler and aggregator only ever raise InvalidRatingError and
InvalidLimitError. The remaining errors belong to the service and adapter layers.
"""

from .constants import MAX_QUALITY, MIN_QUALITY


class MnemoError(Exception):
    """Base class for every error raised by mnemo."""


class InvalidRatingError(MnemoError, ValueError):
    """A quality rating outside the closed range [0, 5], or not an integer."""

    def __init__(self, quality: object):
        self.quality = quality
        super().__init__(
            f"Quality must be an integer between {MIN_QUALITY} and {MAX_QUALITY}, "
            f"got {quality!r}"
        )


class InvalidLimitError(MnemoError, ValueError):
    """A due-queue limit that is not a positive integer, or exceeds the allowed maximum."""

    def __init__(self, limit: object, message: str | None = None):
        self.limit = limit
        super().__init__(message or f"Limit must be a positive integer, got {limit!r}")


class ItemNotFoundError(MnemoError, LookupError):
    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class SnapshotError(MnemoError):
    """A review snapshot file could not be read or is malformed."""
