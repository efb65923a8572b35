"""In-process storage for the short-link engine."""

import asyncio
import dataclasses
import logging
from typing import Dict, List, Optional

from .base import AuditLogBase, LinkStoreBase
from .models import LinkRecord, LogEntry


class ShortLinkMemoryDB(LinkStoreBase, AuditLogBase):
    """Keeps links and logs in memory. Contents are lost on close."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._links: Dict[str, LinkRecord] = {}
        self._logs: List[LogEntry] = []
        self._lock = asyncio.Lock()

    async def insert_if_absent(self, record: LinkRecord) -> bool:
        async with self._lock:
            if record.slug in self._links:
                self.logger.warning(f"Slug already exists: {record.slug}")
                return False
            self._links[record.slug] = record
        return True

    async def find_by_slug(self, slug: str) -> Optional[LinkRecord]:
        return self._links.get(slug)

    async def list_by_owner(self, owner: str) -> List[LinkRecord]:
        # dicts keep insertion order
        return [r for r in self._links.values() if r.owner == owner]

    async def append(self, entry: LogEntry) -> LogEntry:
        async with self._lock:
            stored = dataclasses.replace(entry, seq=len(self._logs) + 1)
            self._logs.append(stored)
        return stored

    async def recent_by_user(self, user: str, limit: int = 10) -> List[LogEntry]:
        if limit <= 0:
            return []
        result = []
        for entry in reversed(self._logs):
            if entry.user == user:
                result.append(entry)
                if len(result) >= limit:
                    break
        return result

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self._links.clear()
        self._logs.clear()
