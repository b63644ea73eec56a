"""Collection filters usable from Python render functions and Jinja2 templates.

Filters are pure functions of their inputs. Nothing here is cached: a
collection may change between builds and the renderer has no invalidation
mechanism of its own.
"""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def recent_entries(collection: Sequence[T], n: int) -> tuple[T, ...]:
    """Select the n most recently added entries, most recent first.

    Collections are ordered oldest first, so this takes the suffix of length
    min(n, len(collection)) and reverses it.

    Args:
        collection: Ordered entries, oldest first
        n: Number of entries to select

    Returns:
        Tuple of at most n entries, newest first

    Raises:
        ValueError: If n is negative

    Examples:
        >>> recent_entries(["a", "b", "c", "d"], 3)
        ('d', 'c', 'b')
        >>> recent_entries(["a"], 3)
        ('a',)
        >>> recent_entries([], 3)
        ()
    """
    if n < 0:
        raise ValueError(f"Cannot select a negative number of entries: {n}")

    # collection[-0:] would be the whole collection
    start = len(collection) - min(n, len(collection))
    return tuple(reversed(collection[start:]))
