"""Abstract base classes for short-link storage implementations."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import LinkRecord, LogEntry


class LinkStoreBase(ABC):
    """Abstract base class for link record storage."""

    @abstractmethod
    async def insert_if_absent(self, record: LinkRecord) -> bool:
        """Insert a record unless its slug is already taken.

        The existence check and the insert must be indivisible with respect
        to other writers.

        Args:
            record: The record to insert

        Returns:
            True if inserted, False if the slug already exists
        """
        pass

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Optional[LinkRecord]:
        """Get the record for a slug.

        Args:
            slug: The slug to lookup

        Returns:
            The record if found, None otherwise
        """
        pass

    async def slug_exists(self, slug: str) -> bool:
        """Check if a slug is already taken.

        Args:
            slug: The slug to check

        Returns:
            True if exists, False otherwise
        """
        return await self.find_by_slug(slug) is not None

    @abstractmethod
    async def list_by_owner(self, owner: str) -> List[LinkRecord]:
        """List an owner's records in insertion order.

        Args:
            owner: Principal identifier

        Returns:
            List of records
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections and file handles."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass


class AuditLogBase(ABC):
    """Abstract base class for the append-only audit log."""

    @abstractmethod
    async def append(self, entry: LogEntry) -> LogEntry:
        """Append an entry.

        Args:
            entry: The entry to append

        Returns:
            The stored entry with its sequence number assigned

        Raises:
            StoreUnavailableError: If the entry could not be persisted
        """
        pass

    @abstractmethod
    async def recent_by_user(self, user: str, limit: int = 10) -> List[LogEntry]:
        """List a principal's most recent entries, newest first.

        Args:
            user: Principal identifier
            limit: Maximum number of entries to return

        Returns:
            List of log entries
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections and file handles."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the log is reachable."""
        pass
