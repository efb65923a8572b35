"""Slug generation and allocation."""

import logging
import random
import string
from typing import Optional

from .common.validators import is_valid_slug
from .database.base import LinkStoreBase
from .errors import DuplicateSlugError, InvalidSlugFormatError

MIN_SLUG_LENGTH = 6


class SlugGenerator:
    """Generate random slugs."""

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits

    def __init__(self, default_length: int = MIN_SLUG_LENGTH, rng: Optional[random.Random] = None):
        """Initialize slug generator.

        Args:
            default_length: Length of generated slugs (at least 6)
            rng: Optional random source, mainly for tests
        """
        if default_length < MIN_SLUG_LENGTH:
            raise ValueError(f"Generated slugs must be at least {MIN_SLUG_LENGTH} characters")
        self.default_length = default_length
        self._rng = rng or random.Random()

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random slug.

        Args:
            length: Length of the slug (uses default if not specified)

        Returns:
            Random alphanumeric slug
        """
        length = max(length or self.default_length, MIN_SLUG_LENGTH)
        return "".join(self._rng.choices(self.BASE62_CHARS, k=length))


class SlugAllocator:
    """Produce a slug from a caller candidate or the generator.

    Allocation only checks; it does not reserve. The caller must still
    insert with LinkStoreBase.insert_if_absent.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        generator: Optional[SlugGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.generator = generator or SlugGenerator()
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def normalize_candidate(candidate: Optional[str]) -> Optional[str]:
        """Return the trimmed candidate, or None when blank."""
        if candidate is None:
            return None
        candidate = candidate.strip()
        return candidate or None

    async def allocate(self, candidate: Optional[str] = None) -> str:
        """Pick a slug and check it against the format rule and the store.

        Args:
            candidate: Optional caller-supplied slug

        Returns:
            A slug that was free at the time of the check

        Raises:
            InvalidSlugFormatError: If the slug has characters outside [A-Za-z0-9_-]
            DuplicateSlugError: If the slug is already in the store
        """
        slug = self.normalize_candidate(candidate) or self.generator.generate_random()

        is_valid, error = is_valid_slug(slug)
        if not is_valid:
            self.logger.warning(f"Rejected slug {slug!r}: {error}")
            raise InvalidSlugFormatError(slug)

        if await self.store.slug_exists(slug):
            self.logger.warning(f"Slug already exists: {slug}")
            raise DuplicateSlugError(slug)

        return slug
