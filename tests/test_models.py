"""Tests for data models and the expiry policy."""

from datetime import datetime, timedelta, timezone

import pytest

from shortlink.database.models import LinkRecord, LogAction, LogEntry
from shortlink.expiry import is_active, is_expired

CREATED = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestLinkRecord:
    def test_create_sets_deadline(self):
        record = LinkRecord.create("abc123", "https://example.com", "alice", 30, CREATED)

        assert record.valid_until == CREATED + timedelta(minutes=30)
        assert record.ttl_minutes == 30

    def test_immutable(self):
        record = LinkRecord.create("abc123", "https://example.com", "alice", 30, CREATED)

        with pytest.raises(AttributeError):
            record.destination = "https://evil.example"

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            LinkRecord.create("abc123", "https://example.com", "alice", 0, CREATED)

    def test_dict_conversion(self):
        record = LinkRecord.create("abc123", "https://example.com", "alice", 5, CREATED)

        data = record.to_dict()
        assert data["valid_until"] == "2024-01-01T12:05:00+00:00"
        assert LinkRecord.from_dict(data) == record

    def test_from_dict_assumes_utc_for_naive_times(self):
        record = LinkRecord.from_dict({
            "slug": "abc123",
            "destination": "https://example.com",
            "owner": "alice",
            "created_at": "2024-01-01T12:00:00",
            "valid_until": "2024-01-01T12:05:00",
            "ttl_minutes": 5,
        })

        assert record.created_at == CREATED


class TestLogEntry:
    def test_dict_conversion_keeps_action_and_seq(self):
        entry = LogEntry(time=CREATED, action=LogAction.SHORTEN, user="alice", details="Slug: x", seq=4)

        restored = LogEntry.from_dict(entry.to_dict())
        assert restored.action is LogAction.SHORTEN
        assert restored.seq == 4
        assert restored == entry

    def test_user_defaults_to_empty(self):
        entry = LogEntry.from_dict({"time": CREATED.isoformat(), "action": "Login", "user": None})
        assert entry.user == ""
        assert entry.details == ""


class TestExpiryPolicy:
    def test_deadline_is_inclusive(self):
        record = LinkRecord.create("abc123", "https://example.com", "alice", 1, CREATED)

        assert is_active(record, CREATED)
        assert is_active(record, CREATED + timedelta(minutes=1))
        assert not is_active(record, CREATED + timedelta(minutes=1, microseconds=1))
        assert is_expired(record, CREATED + timedelta(seconds=61))
