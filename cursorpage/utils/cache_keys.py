"""
Cache key generation for the cursor overflow cache.

Keeps every key in the ``<prefix>:<part>:<part>`` format so keys written by
different processes share one namespace.
"""


class CacheKeyFactory:
    """Factory for generating consistent cache keys."""

    @staticmethod
    def generate(prefix: str, *parts: str | int) -> str:
        """
        Generate a cache key from a prefix and additional parts.

        Args:
            prefix: Key namespace prefix (e.g. "paginator_cursor").
            *parts: Additional string/int segments joined with ":".

        Returns:
            Cache key string.

        Examples:
            >>> CacheKeyFactory.generate("paginator_cursor", "4f1c")
            'paginator_cursor:4f1c'
        """
        return ":".join([prefix, *[str(p) for p in parts]])
