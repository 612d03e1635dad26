"""
Custom exception classes for cursor pagination.

Every error raised here describes malformed caller input or an expired or
foreign cursor. None of them are transient, so callers should surface them as
a failed request rather than retry.
"""

from typing import Any


class CursorPageError(Exception):
    """
    Base class for all pagination errors.

    Attributes:
        details: Optional structured context for diagnostics.
    """

    def __init__(self, msg: str = "", details: dict[str, Any] | None = None):
        super().__init__(msg)
        self.details = details

    def __str__(self) -> str:
        message = super().__str__()
        if not self.details:
            return message
        return f"{message} - {self.details!r}"


class MalformedTokenError(CursorPageError):
    """
    Opaque token could not be decoded.

    Raised when the token is absent or when any of the decoding stages fails.
    ``stage`` tells which one: ``missing``, ``encoding``, ``compression`` or
    ``structure``.
    """

    def __init__(self, msg: str, stage: str):
        super().__init__(msg)
        self.stage = stage


class CursorParseError(CursorPageError):
    """
    Paginator cursor could not be turned back into paginator state.

    Raised when the token itself is malformed, when an overflow key is no
    longer present in the cache, or when the tagged sort payload is invalid.
    """

    pass


class InvalidFilterError(CursorPageError):
    """
    Filter request is not supported.

    Raised for unknown filter or search names and for filter arguments that
    fail validation.
    """

    pass


class InvalidSortError(CursorPageError):
    """
    Sort request cannot be applied to the collection.

    Raised when a sort names an unknown column or an unsupported direction.
    """

    pass


class SnapshotStateError(CursorPageError):
    """
    Paginator does not describe a results snapshot.

    Raised when a SnapshotPaginator is built over a paginator without
    metadata, or whose metadata lacks the offsets or collection key.
    """

    pass
