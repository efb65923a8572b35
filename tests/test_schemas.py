"""Tests for presentation views."""

from datetime import datetime, timedelta, timezone

from shortlink.database.models import LinkRecord, LogAction, LogEntry
from shortlink.schemas import ActivityEntry, LinkSummary, ShortLinkDescriptor

CREATED = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_descriptor_composes_short_url():
    record = LinkRecord.create("abc123", "https://example.com/long", "alice", 30, CREATED)

    descriptor = ShortLinkDescriptor.from_record(record, "https://sho.rt/")

    assert descriptor.short_url == "https://sho.rt/s/abc123"
    assert descriptor.expires_at == CREATED + timedelta(minutes=30)
    assert descriptor.model_dump(mode="json")["expires_at"].startswith("2024-01-01T12:30:00")


def test_link_summary_expired_flag():
    record = LinkRecord.create("abc123", "https://example.com", "alice", 1, CREATED)

    active = LinkSummary.from_record(record, "https://sho.rt", now=CREATED + timedelta(seconds=60))
    expired = LinkSummary.from_record(record, "https://sho.rt", now=CREATED + timedelta(seconds=61))

    assert not active.expired
    assert expired.expired
    assert expired.short_url == "https://sho.rt/s/abc123"


def test_activity_entry_render():
    entry = LogEntry(time=CREATED, action=LogAction.SHORTEN, user="alice", details="Slug: abc123, Expiry: 5 min", seq=1)
    view = ActivityEntry.from_entry(entry)

    assert view.action == "Shorten"
    assert view.render() == "[2024-01-01T12:00:00+00:00] Shorten Slug: abc123, Expiry: 5 min"

    logout = ActivityEntry.from_entry(LogEntry(time=CREATED, action=LogAction.LOGOUT, user="alice"))
    assert logout.render() == "[2024-01-01T12:00:00+00:00] Logout"
