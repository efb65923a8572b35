"""Data models for the short-link engine."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional


class LogAction(str, Enum):
    """Audit log actions.

    Login, Register and Logout come from the authentication layer and are
    stored as opaque events.
    """

    LOGIN = "Login"
    REGISTER = "Register"
    LOGOUT = "Logout"
    SHORTEN = "Shorten"
    REDIRECT = "Redirect"


def _parse_instant(value) -> datetime:
    if isinstance(value, datetime):
        instant = value
    else:
        instant = datetime.fromisoformat(value)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


@dataclass(frozen=True)
class LinkRecord:
    """Represents a slug -> destination mapping. Never mutated after creation."""

    slug: str
    destination: str
    owner: str
    created_at: datetime
    valid_until: datetime
    ttl_minutes: int

    def __post_init__(self):
        if self.ttl_minutes <= 0:
            raise ValueError(f"ttl_minutes must be positive, got {self.ttl_minutes}")
        if self.valid_until <= self.created_at:
            raise ValueError("valid_until must be after created_at")

    @classmethod
    def create(
        cls,
        slug: str,
        destination: str,
        owner: str,
        ttl_minutes: int,
        created_at: datetime,
    ) -> "LinkRecord":
        """Build a record whose deadline is created_at + ttl_minutes."""
        return cls(
            slug=slug,
            destination=destination,
            owner=owner,
            created_at=created_at,
            valid_until=created_at + timedelta(minutes=ttl_minutes),
            ttl_minutes=ttl_minutes,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "slug": self.slug,
            "destination": self.destination,
            "owner": self.owner,
            "created_at": self.created_at.isoformat(),
            "valid_until": self.valid_until.isoformat(),
            "ttl_minutes": self.ttl_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LinkRecord":
        """Create from dictionary."""
        return cls(
            slug=data["slug"],
            destination=data["destination"],
            owner=data.get("owner", ""),
            created_at=_parse_instant(data["created_at"]),
            valid_until=_parse_instant(data["valid_until"]),
            ttl_minutes=int(data["ttl_minutes"]),
        )


@dataclass(frozen=True)
class LogEntry:
    """A single audit event attributed to a principal."""

    time: datetime
    action: LogAction
    user: str = ""
    details: str = ""
    # Assigned by the audit log on append
    seq: Optional[int] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "seq": self.seq,
            "time": self.time.isoformat(),
            "user": self.user,
            "action": self.action.value,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LogEntry":
        """Create from dictionary."""
        return cls(
            time=_parse_instant(data["time"]),
            action=LogAction(data["action"]),
            user=data.get("user") or "",
            details=data.get("details") or "",
            seq=data.get("seq"),
        )
