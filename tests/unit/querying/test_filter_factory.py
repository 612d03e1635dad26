"""Tests for FilterFactory."""

import pytest

from cursorpage.exceptions import InvalidFilterError
from cursorpage.querying.factory import FilterFactory
from cursorpage.querying.filters import (
    AbstractEnumFilter,
    AbstractRangeFilter,
    DefaultFilter,
)


class StatusFilter(AbstractEnumFilter):
    filter_name = "status"
    column = "title"


class EarningsRangeFilter(AbstractRangeFilter):
    filter_name = "earnings_range"
    column = "earnings"


@pytest.fixture
def factory():
    factory = FilterFactory()
    factory.register_filter(StatusFilter)
    factory.register_filter(EarningsRangeFilter)
    return factory


class TestFilterFactory:
    """Tests for FilterFactory.create_filters."""

    def test_registered_filter_from_mapping(self, factory):
        filters = factory.create_filters({"status": {"value": ["draft"]}})

        assert len(filters) == 1
        assert isinstance(filters[0], StatusFilter)
        assert filters[0].values == ["draft"]

    def test_registered_filter_from_bare_value(self, factory):
        (status_filter,) = factory.create_filters({"status": "draft"})

        assert status_filter.values == ["draft"]

    def test_range_filter_from_pair(self, factory):
        (range_filter,) = factory.create_filters({"earnings_range": [1, 10]})

        assert range_filter.min_value == 1
        assert range_filter.max_value == 10

    def test_filters_not_present_are_skipped(self, factory):
        assert factory.create_filters({"status": {"value": None}}) == []

    def test_unknown_filter(self, factory):
        with pytest.raises(InvalidFilterError, match="Unsupported filter: invalid"):
            factory.create_filters({"invalid": {"value": "123"}})

    def test_unknown_filter_uses_default(self):
        factory = FilterFactory(use_default_filter=True)

        (default_filter,) = factory.create_filters({"title": "test2"})

        assert isinstance(default_filter, DefaultFilter)
        assert default_filter.arguments == {"title": "test2"}

    def test_invalid_arguments(self, factory):
        with pytest.raises(InvalidFilterError, match="Invalid filter options"):
            factory.create_filters({"status": {"colour": "red"}})

    def test_invalid_bare_argument(self, factory):
        with pytest.raises(InvalidFilterError):
            factory.create_filters({"earnings_range": 5})

    def test_non_mapping_configuration(self, factory):
        with pytest.raises(InvalidFilterError, match="Unsupported filter configuration"):
            factory.create_filters(["title = ?", "test2"])

    def test_register_under_custom_name(self):
        factory = FilterFactory()
        factory.register_filter(StatusFilter, name="state")

        (state_filter,) = factory.create_filters({"state": "draft"})

        assert isinstance(state_filter, StatusFilter)

    def test_register_requires_name(self):
        class UnnamedFilter(AbstractEnumFilter):
            column = "title"

        with pytest.raises(ValueError):
            FilterFactory().register_filter(UnnamedFilter)
