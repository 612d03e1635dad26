"""
Sort definitions for paged record sets.

A sort is either a mapping of column name to direction (``"asc"``/``"desc"``,
or a nested mapping for a related model) or a ``RawSort``: a literal ordering
expression that cannot be normalized or shown to API consumers. A ``RawSort``
may also appear as a key inside a sort mapping.

Raw expressions are not JSON-safe, so cursors carry them in a tagged form::

    RawSort(sql="...")           -> {"sql_literal": {"raw_sql": "..."}}
    {RawSort(sql="..."): "asc"}  -> {"sql_literal_1": {"raw_sql": "...",
                                                       "hash_value": "asc"}}
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from cursorpage.exceptions import CursorParseError

SQL_LITERAL_TAG = "sql_literal"
DIRECTIONS = ("asc", "desc")


class RawSort(BaseModel):  # type: ignore[misc]
    """Literal ordering expression, passed to the database verbatim."""

    model_config = ConfigDict(frozen=True)

    sql: str

    def __str__(self) -> str:
        return self.sql


def normalize_sort(sort_arg: Any) -> dict[str, Any]:
    """
    Canonicalize a sort argument into an ordered mapping of column → direction.

    Args:
        sort_arg: None, a column name (``"title"``), a name and direction
            (``"title DESC"``), a comma separated list of those, a mapping of
            name → direction, or a RawSort.

    Returns:
        Ordered mapping with lower-cased directions. A RawSort (or None)
        normalizes to an empty mapping. Blank keys are dropped, nested
        mappings are kept nested, and RawSort keys inside a mapping are kept
        so the ordering can still be applied.

    Example:
        >>> normalize_sort("drafted_on DESC, title")
        {'drafted_on': 'desc', 'title': 'asc'}
    """
    if sort_arg is None or isinstance(sort_arg, RawSort):
        entries = []
    elif isinstance(sort_arg, Mapping):
        entries = list(sort_arg.items())
    elif isinstance(sort_arg, str):
        entries = []
        for term in sort_arg.split(","):
            parts = term.split()
            if not parts:
                continue
            entries.append((parts[0], parts[1] if len(parts) > 1 else "asc"))
    else:
        raise TypeError(f"Unsupported sort argument: {sort_arg!r}")

    normalized: dict[Any, Any] = {}
    for key, value in entries:
        if isinstance(key, str):
            key = key.strip()
        if not key:
            continue
        normalized[key] = _normalize_direction(value)
    return normalized


def _normalize_direction(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_sort(value)
    return str(value).strip().lower()


def visible_sort(sort: Any) -> dict[str, Any]:
    """
    User-visible form of a sort: every raw ordering expression is removed.
    """
    if not isinstance(sort, Mapping):
        return normalize_sort(sort)

    visible = {}
    for key, value in normalize_sort(sort).items():
        if isinstance(key, RawSort):
            continue
        visible[key] = visible_sort(value) if isinstance(value, Mapping) else value
    return visible


def is_sort_present(sort: Any) -> bool:
    """True when ``sort`` carries any ordering information."""
    if isinstance(sort, RawSort):
        return bool(sort.sql.strip())
    return bool(sort)


def serialize_sort(sort: Any) -> Any:
    """Replace raw ordering expressions with their JSON-safe tagged form."""
    if isinstance(sort, RawSort):
        return {SQL_LITERAL_TAG: {"raw_sql": sort.sql}}
    if not isinstance(sort, Mapping):
        return sort

    serialized = {}
    for index, (key, value) in enumerate(sort.items(), start=1):
        if isinstance(value, Mapping):
            value = serialize_sort(value)
        if isinstance(key, RawSort):
            serialized[f"{SQL_LITERAL_TAG}_{index}"] = {
                "raw_sql": key.sql,
                "hash_value": value,
            }
        else:
            serialized[key] = value
    return serialized


def deserialize_sort(sort: Any) -> Any:
    """
    Restore raw ordering expressions from their tagged form.

    Raises:
        CursorParseError: If a tagged entry does not have the expected shape.
    """
    if not isinstance(sort, Mapping):
        return sort
    if SQL_LITERAL_TAG in sort:
        return RawSort(sql=_raw_sql(sort[SQL_LITERAL_TAG]))

    deserialized: dict[Any, Any] = {}
    for key, value in sort.items():
        if str(key).startswith(f"{SQL_LITERAL_TAG}_"):
            if not isinstance(value, Mapping):
                raise CursorParseError(
                    f"un-parsable paginator cursor: invalid sort entry {key}"
                )
            deserialized[RawSort(sql=_raw_sql(value))] = deserialize_sort(
                value.get("hash_value")
            )
        else:
            deserialized[key] = deserialize_sort(value)
    return deserialized


def _raw_sql(tagged: Any) -> str:
    if not isinstance(tagged, Mapping) or not isinstance(
        tagged.get("raw_sql"), str
    ):
        raise CursorParseError(
            f"un-parsable paginator cursor: invalid raw sort {tagged!r}"
        )
    return tagged["raw_sql"]
