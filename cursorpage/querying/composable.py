from typing import Any

from sqlalchemy import ColumnElement, Select

from cursorpage.exceptions import InvalidFilterError


class ComposableQuery:
    """
    Statement under construction, shared by the filters applied to it.

    Attributes:
        model: The SQLModel class being queried.
    """

    def __init__(self, model: type[Any], initial_query: Select):
        self.model = model
        self._query = initial_query

    def add(self, clause: ColumnElement[bool]) -> "ComposableQuery":
        self._query = self._query.where(clause)
        return self

    def column(self, name: str) -> Any:
        """Mapped column attribute ``name`` of the model."""
        attr = getattr(self.model, name, None)
        if attr is None or not hasattr(attr, "in_"):
            raise InvalidFilterError(
                f"Invalid filter: {name} is not an attribute of {self.model.__name__}"
            )
        return attr

    def build(self) -> Select:
        return self._query
