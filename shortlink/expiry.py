"""Lazy expiry policy for link records."""

from datetime import datetime

from .database.models import LinkRecord


def is_active(record: LinkRecord, now: datetime) -> bool:
    """A record resolves while now <= valid_until (inclusive deadline)."""
    return now <= record.valid_until


def is_expired(record: LinkRecord, now: datetime) -> bool:
    return not is_active(record, now)
