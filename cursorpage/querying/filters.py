"""
Filters applied to collection queries.

Filters are Pydantic models, so their arguments are validated on
construction. Concrete filters subclass one of the abstract filters below and
name the column they operate on:

Example:
    ```python
    class StatusFilter(AbstractEnumFilter):
        filter_name = "status"
        column = "status"


    factory = FilterFactory()
    factory.register_filter(StatusFilter)
    filters = factory.create_filters({"status": {"value": ["draft"]}})
    ```
"""

import operator
from collections.abc import Callable
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict

from cursorpage.querying.composable import ComposableQuery


class AbstractFilter(BaseModel):  # type: ignore[misc]
    """Base class for all filters. Filters that are not present are skipped."""

    model_config = ConfigDict(extra="forbid")

    filter_name: ClassVar[str | None] = None
    column: ClassVar[str | None] = None

    @classmethod
    def from_argument(cls, argument: Any) -> "AbstractFilter":
        """Build the filter from a non-mapping argument (e.g. a bare value)."""
        return cls(value=argument)

    @property
    def present(self) -> bool:
        return False

    def apply_to(self, query: ComposableQuery) -> None:
        """
        Apply the filter to the given query.

        Args:
            query: The statement to restrict.
        """
        pass

    def to_dict(self) -> dict[str, Any]:
        """Filter arguments keyed by filter name, as accepted by the factory."""
        return {self.filter_name: self.model_dump()}


class DefaultFilter(AbstractFilter):
    """
    Column equality filter used for names with no registered filter.

    List or tuple values match any of their elements.
    """

    arguments: dict[str, Any]

    @property
    def present(self) -> bool:
        return bool(self.arguments)

    def apply_to(self, query: ComposableQuery) -> None:
        for name, value in self.arguments.items():
            attr = query.column(name)
            if isinstance(value, (list, tuple)):
                query.add(attr.in_(value))
            elif value is None:
                query.add(attr.is_(None))
            else:
                query.add(attr == value)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.arguments)


class AbstractEnumFilter(AbstractFilter):
    """Match (or, with exclude, reject) rows whose column is one of the values."""

    value: Any = None
    exclude: Literal["true", "false"] | bool | None = None

    @property
    def present(self) -> bool:
        return self.value is not None

    @property
    def values(self) -> list[Any]:
        if isinstance(self.value, (list, tuple)):
            return list(self.value)
        return [self.value]

    @property
    def excluded(self) -> bool:
        return str(self.exclude).lower() == "true"

    def apply_to(self, query: ComposableQuery) -> None:
        attr = query.column(self.column)
        clause = attr.not_in(self.values) if self.excluded else attr.in_(self.values)
        query.add(clause)


class AbstractRangeFilter(AbstractFilter):
    """Inclusive range over a column; either bound may be omitted."""

    min_value: Any = None
    max_value: Any = None

    @classmethod
    def from_argument(cls, argument: Any) -> "AbstractFilter":
        min_value, max_value = argument
        return cls(min_value=min_value, max_value=max_value)

    @property
    def present(self) -> bool:
        return self.min_value is not None or self.max_value is not None

    def apply_to(self, query: ComposableQuery) -> None:
        attr = query.column(self.column)
        if self.min_value is not None:
            query.add(attr >= self.min_value)
        if self.max_value is not None:
            query.add(attr <= self.max_value)


NUMERIC_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "=": operator.eq,
    "<=": operator.le,
    "<": operator.lt,
}


class AbstractNumericFilter(AbstractFilter):
    """Compare a column against a value with one of > >= = <= <."""

    operator: Literal[">", ">=", "=", "<=", "<"]
    value: float | int | None = None

    @property
    def present(self) -> bool:
        return self.value is not None

    def apply_to(self, query: ComposableQuery) -> None:
        attr = query.column(self.column)
        query.add(NUMERIC_OPERATORS[self.operator](attr, self.value))
