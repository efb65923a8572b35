#!/usr/bin/env python3
"""
Command-line interface for the short-link engine.

Usage:
    shortlink shorten <url> [--slug SLUG] [--ttl MINUTES] [--user USER]
    shortlink resolve <slug>
    shortlink links [--user USER]
    shortlink activity [--user USER] [--limit N]
    shortlink event {Login,Register,Logout} [--user USER] [--details TEXT]
    shortlink health
"""

import argparse
import asyncio
import json
import os
import sys
from typing import Optional

from .config import Config, load_config
from .common.logging_config import setup_logging
from .database import RedisCache, open_database
from .database.models import LogAction
from .errors import LinkExpiredError, LinkNotFoundError, ShortLinkError, StoreUnavailableError
from .schemas import ActivityEntry, LinkSummary, ShortLinkDescriptor
from .service import ShortLinkService
from .slugs import SlugGenerator

# Where callers are sent when a short link cannot be followed
SAFE_DEFAULT_VIEW = "/"


def _print_json(payload: dict, stream=None) -> None:
    print(json.dumps(payload, indent=2, default=str), file=stream or sys.stdout)


def _print_error(message: str, **extra) -> None:
    _print_json({"success": False, "error": message, **extra}, stream=sys.stderr)


class ShortLinkCLI:
    """Command-line interface for the short-link engine."""

    def __init__(self, config: Config, verbose: bool = False):
        """Initialize CLI."""
        self.config = config
        self.logger = setup_logging(
            level="DEBUG" if verbose else config.log_level,
            log_file=config.log_file,
            json_format=config.log_json,
        )
        self.service: Optional[ShortLinkService] = None

    async def initialize(self) -> None:
        """Open the store and build the service."""
        self.logger.debug(f"Opening store {self.config.database_url}")

        db = open_database(
            self.config.database_url,
            pool_max_size=self.config.pool_max_size,
            connection_timeout_seconds=self.config.connection_timeout_seconds,
            create_tables=self.config.create_tables,
            logger=self.logger,
        )

        cache = None
        if self.config.redis_url:
            cache = RedisCache(
                redis_url=self.config.redis_url,
                ttl_seconds=self.config.cache_ttl_seconds,
                logger=self.logger,
            )
            await cache.connect()

        self.service = ShortLinkService(
            store=db,
            audit_log=db,
            cache=cache,
            slug_generator=SlugGenerator(default_length=self.config.slug_length),
            logger=self.logger,
            default_ttl_minutes=self.config.default_ttl_minutes,
            max_collision_retries=self.config.max_collision_retries,
            activity_limit=self.config.activity_limit,
        )

    async def cleanup(self) -> None:
        if self.service:
            await self.service.close()

    async def shorten(self, url: str, user: str, slug: Optional[str] = None, ttl: Optional[str] = None) -> int:
        """Shorten a URL."""
        try:
            record = await self.service.create_link(user, url, slug, ttl)
        except ShortLinkError as e:
            _print_error(str(e))
            return 1

        descriptor = ShortLinkDescriptor.from_record(record, self.config.base_url, self.config.path_prefix)
        _print_json({
            "success": True,
            **descriptor.model_dump(mode="json"),
            "message": f"Shortened: {descriptor.short_url} (valid {record.ttl_minutes} min)",
        })
        return 0

    async def resolve(self, slug: str) -> int:
        """Resolve a slug to its destination."""
        try:
            destination = await self.service.resolve(slug)
        except (LinkNotFoundError, LinkExpiredError) as e:
            _print_error(str(e), redirect=SAFE_DEFAULT_VIEW)
            return 1

        _print_json({"success": True, "slug": slug, "destination": destination})
        return 0

    async def links(self, user: str) -> int:
        """List a user's links."""
        records = await self.service.list_links(user)
        now = self.service.now()
        summaries = [
            LinkSummary.from_record(r, self.config.base_url, self.config.path_prefix, now=now).model_dump(mode="json")
            for r in records
        ]
        _print_json({"success": True, "user": user, "count": len(summaries), "links": summaries})
        return 0

    async def activity(self, user: str, limit: Optional[int] = None) -> int:
        """Show a user's recent log entries."""
        entries = await self.service.recent_activity(user, limit)
        views = [ActivityEntry.from_entry(e) for e in entries]
        _print_json({
            "success": True,
            "user": user,
            "entries": [view.model_dump(mode="json") for view in views],
            "lines": [view.render() for view in views],
        })
        return 0

    async def event(self, action: str, user: str, details: str = "") -> int:
        """Record an authentication event."""
        entry = await self.service.record_event(action, user, details)
        _print_json({"success": True, **ActivityEntry.from_entry(entry).model_dump(mode="json")})
        return 0

    async def health(self) -> int:
        """Check store health."""
        health_status = await self.service.health_check()
        _print_json({"success": True, "health": health_status})
        return 0 if health_status["overall"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shortlink",
        description="Short link CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL for 15 minutes
  %(prog)s shorten https://example.com/long/url --ttl 15 --user alice

  # Shorten with a chosen slug
  %(prog)s shorten https://example.com/long/url --slug mylink --user alice

  # Follow a short link
  %(prog)s resolve mylink

  # Show alice's links and recent activity
  %(prog)s links --user alice
  %(prog)s activity --user alice --limit 5
        """
    )

    parser.add_argument(
        "--database-url",
        default=None,
        help="Store URL: memory:, file:<path> or postgresql://... (default: DATABASE_URL env or file:shortlinks.json)"
    )
    parser.add_argument(
        "--redis-url",
        default=None,
        help="Redis connection URL (optional, default: from REDIS_URL env)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    user_default = os.getenv("SHORTLINK_USER", "")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")
    shorten_parser.add_argument("--slug", help="Custom slug")
    shorten_parser.add_argument("--ttl", help="Lifetime in minutes (default 30)")
    shorten_parser.add_argument("--user", default=user_default, help="Owner of the link")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a slug")
    resolve_parser.add_argument("slug", help="Slug to resolve")

    links_parser = subparsers.add_parser("links", help="List a user's links")
    links_parser.add_argument("--user", default=user_default, help="Owner to list")

    activity_parser = subparsers.add_parser("activity", help="Show recent log entries")
    activity_parser.add_argument("--user", default=user_default, help="User whose entries to show")
    activity_parser.add_argument("--limit", type=int, default=None, help="Maximum number to return")

    event_parser = subparsers.add_parser("event", help="Record an authentication event")
    event_parser.add_argument(
        "action",
        choices=[LogAction.LOGIN.value, LogAction.REGISTER.value, LogAction.LOGOUT.value],
    )
    event_parser.add_argument("--user", default=user_default, help="Acting user")
    event_parser.add_argument("--details", default="", help="Free-text details")

    subparsers.add_parser("health", help="Check store health")

    return parser


async def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    overrides = {}
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.redis_url:
        overrides["redis_url"] = args.redis_url

    try:
        config = load_config(**overrides)
    except ValueError as e:
        _print_error(f"Invalid configuration: {e}")
        return 1

    cli = ShortLinkCLI(config, verbose=args.verbose)

    try:
        try:
            await cli.initialize()
        except ValueError as e:
            _print_error(f"Invalid configuration: {e}")
            return 1

        if args.command == "shorten":
            return await cli.shorten(args.url, args.user, args.slug, args.ttl)
        elif args.command == "resolve":
            return await cli.resolve(args.slug)
        elif args.command == "links":
            return await cli.links(args.user)
        elif args.command == "activity":
            return await cli.activity(args.user, args.limit)
        elif args.command == "event":
            return await cli.event(args.action, args.user, args.details)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1

    except StoreUnavailableError as e:
        _print_error(f"Store unavailable: {e}")
        return 2
    finally:
        await cli.cleanup()


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
