"""
Protocol classes for the collaborators pagination depends on.

Any class implementing the required methods is accepted, so tests and
alternative backends can stand in for Redis without inheritance.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CursorCache(Protocol):
    """
    Out-of-band store for cursor payloads too large to inline in a token.

    Keys are generated per overflowed cursor; payloads are JSON-safe mappings.
    """

    async def write(self, key: str, payload: dict[str, Any], ttl: int) -> None:
        """
        Store a payload under ``key`` for ``ttl`` seconds.

        Args:
            key: Cache key.
            payload: JSON-safe cursor payload.
            ttl: Time-to-live in seconds.
        """
        ...

    async def read(self, key: str) -> dict[str, Any] | None:
        """
        Fetch the payload stored under ``key``.

        Returns:
            The payload, or None if absent or expired.
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove the payload stored under ``key``, if any."""
        ...
