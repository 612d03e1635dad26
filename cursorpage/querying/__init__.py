from cursorpage.querying.batches import ValuesInBatches
from cursorpage.querying.collection_query import CollectionQuery
from cursorpage.querying.composable import ComposableQuery
from cursorpage.querying.factory import FilterFactory
from cursorpage.querying.filters import (
    AbstractEnumFilter,
    AbstractFilter,
    AbstractNumericFilter,
    AbstractRangeFilter,
    DefaultFilter,
)

__all__ = [
    "AbstractEnumFilter",
    "AbstractFilter",
    "AbstractNumericFilter",
    "AbstractRangeFilter",
    "CollectionQuery",
    "ComposableQuery",
    "DefaultFilter",
    "FilterFactory",
    "ValuesInBatches",
]
