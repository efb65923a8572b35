"""Short-link lifecycle and resolution engine."""

from .errors import (
    DuplicateSlugError,
    EmptyDestinationError,
    InvalidSlugFormatError,
    LinkExpiredError,
    LinkNotFoundError,
    ShortLinkError,
    StoreUnavailableError,
)
from .service import ShortLinkService
from .slugs import SlugAllocator, SlugGenerator

__version__ = "1.0.0"

__all__ = [
    "DuplicateSlugError",
    "EmptyDestinationError",
    "InvalidSlugFormatError",
    "LinkExpiredError",
    "LinkNotFoundError",
    "ShortLinkError",
    "ShortLinkService",
    "SlugAllocator",
    "SlugGenerator",
    "StoreUnavailableError",
]
