"""Validation and parsing utilities for the short-link engine."""

import math
import re
from typing import Any, Optional, Tuple

SLUG_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

# Leading integer, as the browser form's parseInt reads it
_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")

DEFAULT_TTL_MINUTES = 30


def is_valid_slug(slug: str) -> Tuple[bool, str]:
    """Validate a slug.

    Args:
        slug: The slug to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not slug or not isinstance(slug, str):
        return False, "Slug is required"

    if not SLUG_PATTERN.fullmatch(slug):
        return False, "Slug can only contain letters, numbers, hyphens, and underscores"

    return True, ""


def is_valid_destination(destination: Any) -> Tuple[bool, str]:
    """Validate a destination address.

    The address is opaque to the engine; only emptiness is rejected.
    """
    if not isinstance(destination, str) or not destination.strip():
        return False, "Destination is required"
    return True, ""


def parse_ttl_minutes(raw: Optional[Any], default: int = DEFAULT_TTL_MINUTES) -> int:
    """Parse a requested lifetime in minutes.

    Anything missing, non-numeric, or not positive falls back to ``default``
    without raising. Strings are read up to the first non-digit, so "15min"
    is 15 and "2.9" is 2.

    Args:
        raw: Raw TTL input (string, int, or None)
        default: Fallback lifetime in minutes

    Returns:
        A positive number of minutes
    """
    if raw is None or isinstance(raw, bool):
        return default

    if isinstance(raw, int):
        minutes = raw
    elif isinstance(raw, float):
        if not math.isfinite(raw):
            return default
        minutes = int(raw)
    else:
        match = _LEADING_INT.match(str(raw))
        if not match:
            return default
        minutes = int(match.group(1))

    if minutes <= 0:
        return default
    return minutes
