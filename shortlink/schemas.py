"""Pydantic views handed to the presentation layer."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common.url_builder import DEFAULT_PATH_PREFIX, build_short_url
from .database.models import LinkRecord, LogEntry
from .expiry import is_expired


class ShortLinkDescriptor(BaseModel):
    """A created short link, ready to display."""

    slug: str = Field(..., description="The slug")
    short_url: str = Field(..., description="The complete short address, <origin>/s/<slug>")
    destination: str = Field(..., description="The target address")
    created_at: datetime = Field(..., description="Creation timestamp")
    expires_at: datetime = Field(..., description="Last instant the link resolves")
    ttl_minutes: int = Field(..., description="Requested lifetime in minutes", gt=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "slug": "abc123",
                    "short_url": "https://short.link/s/abc123",
                    "destination": "https://example.com/very/long/path",
                    "created_at": "2024-01-01T12:00:00Z",
                    "expires_at": "2024-01-01T12:30:00Z",
                    "ttl_minutes": 30,
                }
            ]
        }
    }

    @classmethod
    def from_record(
        cls,
        record: LinkRecord,
        base_url: str,
        path_prefix: str = DEFAULT_PATH_PREFIX,
    ) -> "ShortLinkDescriptor":
        return cls(
            slug=record.slug,
            short_url=build_short_url(record.slug, base_url, path_prefix),
            destination=record.destination,
            created_at=record.created_at,
            expires_at=record.valid_until,
            ttl_minutes=record.ttl_minutes,
        )


class LinkSummary(ShortLinkDescriptor):
    """One row of an owner's link listing."""

    expired: bool = Field(..., description="Whether the link has passed its deadline")

    @classmethod
    def from_record(
        cls,
        record: LinkRecord,
        base_url: str,
        path_prefix: str = DEFAULT_PATH_PREFIX,
        now: Optional[datetime] = None,
    ) -> "LinkSummary":
        descriptor = ShortLinkDescriptor.from_record(record, base_url, path_prefix)
        return cls(
            **descriptor.model_dump(),
            expired=now is not None and is_expired(record, now),
        )


class ActivityEntry(BaseModel):
    """One audit log line."""

    seq: Optional[int] = None
    time: datetime
    user: str
    action: str
    details: str = ""

    @classmethod
    def from_entry(cls, entry: LogEntry) -> "ActivityEntry":
        return cls(
            seq=entry.seq,
            time=entry.time,
            user=entry.user,
            action=entry.action.value,
            details=entry.details,
        )

    def render(self) -> str:
        """Format as a single display line."""
        line = f"[{self.time.isoformat()}] {self.action}"
        return f"{line} {self.details}" if self.details else line
