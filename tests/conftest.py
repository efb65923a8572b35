"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest

from shortlink.common.logging_config import setup_logging
from shortlink.database.json_file import ShortLinkFileDB
from shortlink.database.memory import ShortLinkMemoryDB
from shortlink.service import ShortLinkService
from shortlink.slugs import SlugGenerator


class FakeClock:
    """Manually advanced clock for simulated time."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
async def memory_db(logger) -> AsyncGenerator[ShortLinkMemoryDB, None]:
    db = ShortLinkMemoryDB(logger=logger)
    yield db
    await db.close()


@pytest.fixture
async def file_db(tmp_path, logger) -> AsyncGenerator[ShortLinkFileDB, None]:
    db = ShortLinkFileDB(str(tmp_path / "store.json"), logger=logger)
    yield db
    await db.close()


@pytest.fixture
def slug_generator():
    """Create slug generator."""
    return SlugGenerator(default_length=6)


@pytest.fixture
def service(memory_db, slug_generator, clock, logger) -> ShortLinkService:
    """Create service instance over the in-memory store."""
    return ShortLinkService(
        store=memory_db,
        audit_log=memory_db,
        cache=None,
        slug_generator=slug_generator,
        clock=clock,
        logger=logger,
    )


@pytest.fixture
def sample_urls():
    """Sample destinations for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
