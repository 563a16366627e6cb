"""Random token generation."""

import secrets

from beartype import beartype

from reqtools.core.exceptions import RandomSourceError

RANDOM_STRING_SOURCE = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_+"

# 64 divides 256, so masking a uniform byte keeps the distribution uniform
_INDEX_MASK = len(RANDOM_STRING_SOURCE) - 1


@beartype
def random_string(n: int) -> str:
    """Return ``n`` characters drawn uniformly from RANDOM_STRING_SOURCE."""
    if n < 0:
        raise ValueError(f"length must be non-negative, got {n}")

    try:
        raw = secrets.token_bytes(n)
    except (OSError, NotImplementedError) as ex:
        raise RandomSourceError(f"secure random source failed: {ex}") from ex

    return "".join(RANDOM_STRING_SOURCE[b & _INDEX_MASK] for b in raw)
