"""Exceptions raised by the short-link engine."""


class ShortLinkError(ValueError):
    """Base class for domain failures returned to the caller."""


class InvalidSlugFormatError(ShortLinkError):
    """Slug contains characters outside [A-Za-z0-9_-]."""

    def __init__(self, slug: str):
        super().__init__(
            f"Invalid slug '{slug}': only letters, numbers, hyphens, and underscores are allowed"
        )
        self.slug = slug


class DuplicateSlugError(ShortLinkError):
    """Slug is already claimed, including races lost at insert time."""

    def __init__(self, slug: str):
        super().__init__(f"Slug '{slug}' already exists")
        self.slug = slug


class EmptyDestinationError(ShortLinkError):
    def __init__(self):
        super().__init__("Destination is required")


class LinkNotFoundError(ShortLinkError):
    def __init__(self, slug: str):
        super().__init__(f"Short link '{slug}' not found")
        self.slug = slug


class LinkExpiredError(ShortLinkError):
    def __init__(self, slug: str, valid_until):
        super().__init__(f"Short link '{slug}' expired at {valid_until.isoformat()}")
        self.slug = slug
        self.valid_until = valid_until


class StoreUnavailableError(RuntimeError):
    """The underlying store failed. Not recoverable by the engine."""
