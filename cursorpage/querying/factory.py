from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from cursorpage.exceptions import InvalidFilterError
from cursorpage.logging import logger
from cursorpage.querying.filters import AbstractFilter, DefaultFilter


class FilterFactory:
    """
    Registry turning ``{filter name: arguments}`` mappings into filters.

    Names without a registered filter class fall back to DefaultFilter when
    ``use_default_filter`` is set; otherwise they are rejected.
    """

    def __init__(self, use_default_filter: bool = False):
        self.filter_classes: dict[str, type[AbstractFilter]] = {}
        self.use_default_filter = use_default_filter

    def register_filter(
        self, klass: type[AbstractFilter], name: str | None = None
    ) -> None:
        name = name or klass.filter_name
        if not name:
            raise ValueError(f"{klass.__name__} has no filter_name")
        self.filter_classes[name] = klass

    def create_filters(self, filter_options: Mapping[str, Any]) -> list[AbstractFilter]:
        """
        Build the filters named in ``filter_options``.

        Returns:
            Filters that are present (i.e. actually restrict the query).

        Raises:
            InvalidFilterError: If a filter name is unknown or its arguments
                are invalid.
        """
        if not isinstance(filter_options, Mapping):
            raise InvalidFilterError(
                f"Unsupported filter configuration: {filter_options!r}"
            )

        filters = [
            self._filter_object_by_name(str(name), options)
            for name, options in filter_options.items()
        ]
        return [f for f in filters if f.present]

    def _filter_object_by_name(self, filter_name: str, options: Any) -> AbstractFilter:
        if filter_name in self.filter_classes:
            return self._registered_filter_object(filter_name, options)
        if self.use_default_filter:
            return DefaultFilter(arguments={filter_name: options})
        raise InvalidFilterError(f"Unsupported filter: {filter_name}")

    def _registered_filter_object(self, filter_name: str, options: Any) -> AbstractFilter:
        klass = self.filter_classes[filter_name]
        try:
            if isinstance(options, Mapping):
                return klass(**options)
            return klass.from_argument(options)
        except (ValidationError, TypeError, ValueError) as e:
            logger.error(f"Invalid filter options for {filter_name}: {options} ({e})")
            raise InvalidFilterError(
                f"Invalid filter options for {filter_name}: {options}"
            ) from e
