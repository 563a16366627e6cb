"""Slug generation."""

import re

from beartype import beartype

from reqtools.core.exceptions import InvalidSlugError

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


@beartype
def slugify(text: str) -> str:
    """Lower-case ``text`` and collapse every run outside ``a-z0-9`` into one hyphen.

    Non-ASCII letters are dropped rather than transliterated.
    """
    if not text:
        raise InvalidSlugError("empty strings are not permitted")

    slug = _NON_SLUG_CHARS.sub("-", text.lower()).strip("-")
    if not slug:
        raise InvalidSlugError("after removing characters, slug is of zero length")
    return slug
