"""
Slug generation for short links.
"""

import random
import re
import string
from typing import Iterable


class RandomSlugGenerator:
    """
    Random slug generation strategy.

    Draws each character uniformly from [a-zA-Z0-9]. Not cryptographic: slugs
    are identifiers, not secrets. Uniqueness is left to the store
    (create-if-absent), the caller retries on collision.
    """

    CHARACTERS = string.ascii_letters + string.digits

    def __init__(self, length: int = 6, rng: random.Random = None):
        self.length = length
        self.rng = rng or random.Random()

    def generate(self) -> str:
        """Generate a random string of the configured length"""
        return ''.join(self.rng.choice(self.CHARACTERS) for _ in range(self.length))


CUSTOM_SLUG_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

# Single path segments already taken by routes
RESERVED_SLUGS = frozenset({
    "analytics", "shorten", "links", "health",
    "docs", "redoc", "openapi.json", "favicon.ico",
})


def is_valid_custom_slug(slug: str, max_length: int = 32, reserved: Iterable[str] = RESERVED_SLUGS) -> bool:
    """A custom slug must be a plain URL path segment that no route claims"""
    if not slug or len(slug) > max_length:
        return False
    if slug.lower() in reserved:
        return False
    return CUSTOM_SLUG_PATTERN.fullmatch(slug) is not None
