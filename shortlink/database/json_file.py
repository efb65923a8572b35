"""JSON file storage for the short-link engine.

The file holds a single document with three collections::

    {"users": [...], "links": [...], "logs": [...]}

``users`` belongs to the authentication layer and is written back untouched.
Every operation re-reads the file so that separate CLI invocations see each
other's writes.
"""

import asyncio
import dataclasses
import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional

from ..errors import StoreUnavailableError
from .base import AuditLogBase, LinkStoreBase
from .models import LinkRecord, LogEntry

COLLECTIONS = ("users", "links", "logs")


class ShortLinkFileDB(LinkStoreBase, AuditLogBase):
    """Stores links and logs in a JSON document on disk."""

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        """Initialize file storage.

        Args:
            path: Path of the JSON document (created on first write)
            logger: Optional logger instance
        """
        self.path = os.path.abspath(path)
        self.logger = logger or logging.getLogger(__name__)
        self._lock = asyncio.Lock()

    def _read(self) -> Dict[str, List[Any]]:
        if not os.path.exists(self.path):
            return {name: [] for name in COLLECTIONS}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.path}")
        for name in COLLECTIONS:
            items = data.setdefault(name, [])
            if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
                raise ValueError(f"Expected \"{name}\" to be a list of objects in {self.path}")
        return data

    def _write(self, data: Dict[str, List[Any]]) -> None:
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".shortlink-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def _load(self) -> Dict[str, List[Any]]:
        try:
            return await asyncio.to_thread(self._read)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error reading {self.path}: {e}")
            raise StoreUnavailableError(f"Cannot read store {self.path}: {e}") from e

    async def _save(self, data: Dict[str, List[Any]]) -> None:
        try:
            await asyncio.to_thread(self._write, data)
        except (OSError, TypeError) as e:
            self.logger.error(f"Error writing {self.path}: {e}")
            raise StoreUnavailableError(f"Cannot write store {self.path}: {e}") from e

    def _decode(self, factory, item):
        try:
            return factory(item)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error(f"Corrupt entry in {self.path}: {item!r}: {e}")
            raise StoreUnavailableError(f"Corrupt entry in store {self.path}: {e}") from e

    async def insert_if_absent(self, record: LinkRecord) -> bool:
        async with self._lock:
            data = await self._load()
            if any(link.get("slug") == record.slug for link in data["links"]):
                self.logger.warning(f"Slug already exists: {record.slug}")
                return False
            data["links"].append(record.to_dict())
            await self._save(data)
        return True

    async def find_by_slug(self, slug: str) -> Optional[LinkRecord]:
        data = await self._load()
        for link in data["links"]:
            if link.get("slug") == slug:
                return self._decode(LinkRecord.from_dict, link)
        return None

    async def list_by_owner(self, owner: str) -> List[LinkRecord]:
        data = await self._load()
        return [
            self._decode(LinkRecord.from_dict, link)
            for link in data["links"]
            if (link.get("owner") or "") == owner
        ]

    async def append(self, entry: LogEntry) -> LogEntry:
        async with self._lock:
            data = await self._load()
            last_seq = len(data["logs"])
            if data["logs"]:
                seq = data["logs"][-1].get("seq")
                if isinstance(seq, int) and not isinstance(seq, bool) and seq > 0:
                    last_seq = seq
            stored = dataclasses.replace(entry, seq=last_seq + 1)
            data["logs"].append(stored.to_dict())
            await self._save(data)
        return stored

    async def recent_by_user(self, user: str, limit: int = 10) -> List[LogEntry]:
        if limit <= 0:
            return []
        data = await self._load()
        matching = [self._decode(LogEntry.from_dict, e) for e in data["logs"] if (e.get("user") or "") == user]
        return list(reversed(matching[-limit:]))

    async def health_check(self) -> bool:
        try:
            await self._load()
            return True
        except StoreUnavailableError:
            return False

    async def close(self) -> None:
        self.logger.debug(f"Closed file store {self.path}")
