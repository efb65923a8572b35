"""Business logic service for short links."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from .common.validators import DEFAULT_TTL_MINUTES, is_valid_destination, parse_ttl_minutes
from .database.base import AuditLogBase, LinkStoreBase
from .database.cache import RedisCache
from .database.models import LinkRecord, LogAction, LogEntry
from .errors import DuplicateSlugError, EmptyDestinationError, LinkExpiredError, LinkNotFoundError
from .expiry import is_active
from .slugs import SlugAllocator, SlugGenerator

Clock = Callable[[], datetime]

AUTH_ACTIONS = frozenset({LogAction.LOGIN, LogAction.REGISTER, LogAction.LOGOUT})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ShortLinkService:
    """Creates and resolves short links.

    Holds no state of its own: everything lives in the injected store, audit
    log and optional cache. Domain failures are raised as ShortLinkError
    subclasses and are never retried here, apart from regenerating a random
    slug that collided.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        audit_log: Optional[AuditLogBase] = None,
        cache: Optional[RedisCache] = None,
        slug_generator: Optional[SlugGenerator] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
        default_ttl_minutes: int = DEFAULT_TTL_MINUTES,
        max_collision_retries: int = 5,
        activity_limit: int = 10,
    ):
        """Initialize short link service.

        Args:
            store: Link record store
            audit_log: Audit log (defaults to the store when it implements one)
            cache: Optional read-through cache
            slug_generator: Optional slug generator
            clock: Callable returning the current UTC time
            logger: Optional logger
            default_ttl_minutes: Lifetime used when the requested TTL is unusable
            max_collision_retries: Extra attempts for colliding generated slugs
            activity_limit: Default bound for recent_activity
        """
        if audit_log is None:
            if not isinstance(store, AuditLogBase):
                raise TypeError("audit_log is required when the store does not implement AuditLogBase")
            audit_log = store

        self.store = store
        self.audit_log = audit_log
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.allocator = SlugAllocator(store, slug_generator, logger=self.logger)
        self.clock = clock or utc_now
        self.default_ttl_minutes = default_ttl_minutes
        self.max_collision_retries = max_collision_retries
        self.activity_limit = activity_limit

    def now(self) -> datetime:
        return self.clock()

    async def create_link(
        self,
        owner: Optional[str],
        destination: str,
        candidate_slug: Optional[str] = None,
        ttl_minutes_raw: Optional[Union[str, int]] = None,
    ) -> LinkRecord:
        """Create a new short link.

        Args:
            owner: Principal creating the link ("" when unauthenticated)
            destination: Target address, opaque apart from being non-empty
            candidate_slug: Optional caller-chosen slug; blank means generate one
            ttl_minutes_raw: Requested lifetime; unusable values fall back to the default

        Returns:
            The stored record

        Raises:
            EmptyDestinationError: If destination is empty
            InvalidSlugFormatError: If the slug has characters outside [A-Za-z0-9_-]
            DuplicateSlugError: If the slug is taken, including a lost insert race
        """
        owner = owner or ""

        is_valid, _ = is_valid_destination(destination)
        if not is_valid:
            raise EmptyDestinationError()

        ttl_minutes = self._representable_ttl(
            parse_ttl_minutes(ttl_minutes_raw, default=self.default_ttl_minutes)
        )
        record = await self._claim_slug(owner, destination, candidate_slug, ttl_minutes)

        if self.cache:
            await self.cache.set_record(record, now=record.created_at)

        await self._log(LogAction.SHORTEN, owner, f"Slug: {record.slug}, Expiry: {ttl_minutes} min")

        self.logger.info(f"Created short link: {record.slug} -> {destination} ({ttl_minutes} min)")
        return record

    def _representable_ttl(self, ttl_minutes: int) -> int:
        # A deadline past datetime.max is as unusable as a non-numeric TTL
        try:
            self.now() + timedelta(minutes=ttl_minutes)
        except OverflowError:
            self.logger.debug(f"TTL {ttl_minutes} min overflows, using {self.default_ttl_minutes}")
            return self.default_ttl_minutes
        return ttl_minutes

    async def _claim_slug(
        self,
        owner: str,
        destination: str,
        candidate_slug: Optional[str],
        ttl_minutes: int,
    ) -> LinkRecord:
        """Allocate a slug and insert the record.

        A caller-chosen slug gets one attempt. A generated slug that collides,
        either at the pre-check or at insert, is regenerated up to
        max_collision_retries more times.
        """
        candidate = SlugAllocator.normalize_candidate(candidate_slug)
        attempts = 1 if candidate else self.max_collision_retries + 1

        slug = candidate
        for attempt in range(1, attempts + 1):
            try:
                slug = await self.allocator.allocate(candidate)
            except DuplicateSlugError as e:
                slug = e.slug
                continue

            record = LinkRecord.create(
                slug=slug,
                destination=destination,
                owner=owner,
                ttl_minutes=ttl_minutes,
                created_at=self.now(),
            )
            if await self.store.insert_if_absent(record):
                if attempt > 1:
                    self.logger.debug(f"Generated slug after {attempt} attempts: {slug}")
                return record

            self.logger.warning(f"Slug {slug} was claimed between check and insert")

        raise DuplicateSlugError(slug)

    async def resolve(self, slug: str) -> str:
        """Resolve a slug to its destination and record the redirect.

        Args:
            slug: The slug to resolve

        Returns:
            The destination address

        Raises:
            LinkNotFoundError: If no record has this slug
            LinkExpiredError: If the record is past its deadline
        """
        now = self.now()
        record = await self._lookup(slug, now)

        if record is None:
            self.logger.warning(f"Short link not found: {slug}")
            raise LinkNotFoundError(slug)

        if not is_active(record, now):
            self.logger.warning(f"Short link expired: {slug} (valid until {record.valid_until.isoformat()})")
            raise LinkExpiredError(slug, record.valid_until)

        await self._log(LogAction.REDIRECT, record.owner, f"Slug: {slug}")

        self.logger.debug(f"Resolved {slug} -> {record.destination}")
        return record.destination

    async def _lookup(self, slug: str, now: datetime) -> Optional[LinkRecord]:
        if self.cache:
            cached = await self.cache.get_record(slug)
            if cached:
                self.logger.debug(f"Cache hit for {slug}")
                return cached

        record = await self.store.find_by_slug(slug)

        if record and self.cache:
            await self.cache.set_record(record, now=now)
        return record

    async def list_links(self, owner: Optional[str]) -> List[LinkRecord]:
        """List an owner's links, expired ones included."""
        return await self.store.list_by_owner(owner or "")

    async def recent_activity(self, owner: Optional[str], limit: Optional[int] = None) -> List[LogEntry]:
        """List an owner's most recent log entries, newest first."""
        if limit is None:
            limit = self.activity_limit
        return await self.audit_log.recent_by_user(owner or "", limit)

    async def record_event(
        self,
        action: Union[LogAction, str],
        user: Optional[str],
        details: str = "",
    ) -> LogEntry:
        """Record a Login, Register or Logout event from the authentication layer.

        Raises:
            ValueError: For Shorten/Redirect, which only the engine writes
        """
        action = LogAction(action)
        if action not in AUTH_ACTIONS:
            raise ValueError(f"{action.value} events are recorded by the engine itself")
        return await self._log(action, user or "", details)

    async def _log(self, action: LogAction, user: str, details: str) -> LogEntry:
        entry = LogEntry(time=self.now(), action=action, user=user, details=details)
        return await self.audit_log.append(entry)

    async def health_check(self) -> Dict[str, Any]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        store_healthy = await self.store.health_check()
        if self.audit_log is self.store:
            log_healthy = store_healthy
        else:
            log_healthy = await self.audit_log.health_check()

        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()

        return {
            "store": store_healthy,
            "audit_log": log_healthy,
            "cache": cache_healthy,
            "overall": store_healthy and log_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.store.close()
        if self.audit_log is not self.store:
            await self.audit_log.close()
        if self.cache:
            await self.cache.close()
