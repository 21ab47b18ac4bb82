"""Result caching for provider calls."""

from .memo import Memoizer, memoized

__all__ = ["Memoizer", "memoized"]
