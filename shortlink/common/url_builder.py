"""URL building utilities for short links."""

DEFAULT_PATH_PREFIX = "/s"


def build_short_url(
    slug: str,
    base_url: str,
    path_prefix: str = DEFAULT_PATH_PREFIX,
) -> str:
    """Build complete short URL.

    Args:
        slug: The slug
        base_url: Origin (e.g., https://example.com)
        path_prefix: Path prefix (e.g., /s)

    Returns:
        Complete short URL, e.g. https://example.com/s/abc123
    """
    base = base_url.rstrip("/")
    prefix = path_prefix.strip("/")

    if prefix:
        return f"{base}/{prefix}/{slug}"
    return f"{base}/{slug}"
