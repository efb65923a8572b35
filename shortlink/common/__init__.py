"""Common utilities for the short-link engine."""

from .validators import is_valid_slug, is_valid_destination, parse_ttl_minutes
from .url_builder import build_short_url
from .logging_config import setup_logging

__all__ = [
    "is_valid_slug",
    "is_valid_destination",
    "parse_ttl_minutes",
    "build_short_url",
    "setup_logging",
]
