"""
List filtering and aggregation over in-memory record collections

Every list screen works the same way: take the records fetched from the
API, keep the ones passing the active search, date range and categorical
filters (AND-combined), sort newest first, then total up what is left.

A RecordView describes one record type (which field is its date, which
fields are searchable, which fields can be picked from a dropdown). A
ListQuery carries the active filter values. apply_query() combines them.

Nothing here raises on bad data: unreadable dates count as missing, missing
dates fail any active date bound and sort last.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

import structlog
from pydantic import BaseModel, Field

from packages.common.dates import EPOCH, end_of_day, parse_api_date, start_of_day

logger = structlog.get_logger()

T = TypeVar("T")

# Dropdown value that switches a categorical filter off
ALL = "All"

Accessor = Union[str, Callable[[Any], Any]]


class ListQuery(BaseModel):
    """Active filter values for a list screen"""
    search: Optional[str] = Field(None, description="Case-insensitive substring search")
    date_from: Optional[date] = Field(None, description="Inclusive start day")
    date_to: Optional[date] = Field(None, description="Inclusive end day")
    categories: Dict[str, Optional[str]] = Field(
        default_factory=dict,
        description="Field name -> selected value; 'All' disables the filter",
    )

    @property
    def active_categories(self) -> Dict[str, str]:
        return {
            name: value
            for name, value in self.categories.items()
            if value is not None and value != "" and value != ALL
        }

    @property
    def has_date_filter(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    def with_category(self, name: str, value: Optional[str]) -> "ListQuery":
        return self.model_copy(update={"categories": {**self.categories, name: value}})


def resolve(record: Any, path: str) -> Any:
    """
    Read a (possibly dotted) field from a model or a mapping.

    Missing attributes or keys anywhere along the path give None.
    """
    value = record
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def _read(record: Any, accessor: Accessor) -> Any:
    if callable(accessor):
        return accessor(record)
    return resolve(record, accessor)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Enum):
        value = value.value
    return str(value)


@dataclass(frozen=True)
class RecordView:
    """How one record type is searched, filtered and sorted"""
    name: str
    date_field: Accessor
    search_fields: Tuple[Accessor, ...]
    categorical_fields: Mapping[str, Accessor] = field(default_factory=dict)

    def date_of(self, record: Any) -> Optional[datetime]:
        label = self.date_field if isinstance(self.date_field, str) else "date"
        return parse_api_date(_read(record, self.date_field), field=f"{self.name}.{label}")

    def searchable_text(self, record: Any) -> List[str]:
        texts = []
        for accessor in self.search_fields:
            text = _as_text(_read(record, accessor))
            if text:
                texts.append(text)
        return texts

    def category_of(self, record: Any, name: str) -> Any:
        # Names not declared on the view are read as plain attribute paths
        return _read(record, self.categorical_fields.get(name, name))


@dataclass
class FilteredView(Generic[T]):
    """Filtered, sorted records plus the size of the unfiltered collection"""
    items: List[T]
    total: int

    @property
    def matched(self) -> int:
        return len(self.items)


def matches_search(record: Any, view: RecordView, search: Optional[str]) -> bool:
    if not search:
        return True
    needle = search.lower()
    return any(needle in text.lower() for text in view.searchable_text(record))


def within_dates(
    record_date: Optional[datetime],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> bool:
    """Inclusive day-range check; a missing date fails any active bound."""
    if date_from is None and date_to is None:
        return True
    if record_date is None:
        return False
    if date_from is not None and record_date < start_of_day(date_from):
        return False
    if date_to is not None and record_date > end_of_day(date_to):
        return False
    return True


def matches_categories(record: Any, view: RecordView, categories: Mapping[str, str]) -> bool:
    for name, selected in categories.items():
        value = _as_text(view.category_of(record, name))
        if value != _as_text(selected):
            return False
    return True


def build_predicate(view: RecordView, query: ListQuery) -> Callable[[Any, Optional[datetime]], bool]:
    """
    Single predicate ANDing every active filter of the query.

    The predicate takes the record and its already parsed date.
    """
    search = query.search
    categories = query.active_categories
    date_filtered = query.has_date_filter

    def predicate(record: Any, record_date: Optional[datetime]) -> bool:
        if not matches_search(record, view, search):
            return False
        if date_filtered and not within_dates(record_date, query.date_from, query.date_to):
            return False
        return matches_categories(record, view, categories)

    return predicate


def _dated(records: Iterable[T], view: RecordView) -> List[Tuple[Optional[datetime], T]]:
    return [(view.date_of(r), r) for r in records]


def _newest_first(dated: Iterable[Tuple[Optional[datetime], T]]) -> List[T]:
    # Undated records sort as the epoch; sorted() is stable
    ordered = sorted(dated, key=lambda pair: pair[0] or EPOCH, reverse=True)
    return [record for _, record in ordered]


def sort_by_date_desc(records: Iterable[T], view: RecordView) -> List[T]:
    """Newest first; records without a usable date sort as the epoch. Stable."""
    return _newest_first(_dated(records, view))


def apply_query(records: Sequence[T], view: RecordView, query: Optional[ListQuery] = None) -> FilteredView[T]:
    """
    Filter and sort a record collection.

    Each record's date is parsed once and shared by the date filter and the sort.

    Args:
        records: Records as held by the caller (not modified)
        view: Description of the record type
        query: Active filters; None means no filtering

    Returns:
        FilteredView with the matching records, newest first
    """
    query = query or ListQuery()
    predicate = build_predicate(view, query)
    items = _newest_first(pair for pair in _dated(records, view) if predicate(pair[1], pair[0]))

    logger.debug("list_filtered",
                 view=view.name,
                 total=len(records),
                 matched=len(items),
                 search=query.search,
                 categories=query.active_categories)

    return FilteredView(items=items, total=len(records))


def _as_decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning("non_numeric_aggregate_value", value=repr(value))
        return Decimal(0)


def sum_field(
    records: Iterable[Any],
    accessor: Accessor,
    where: Optional[Callable[[Any], bool]] = None,
) -> Decimal:
    """Sum a numeric field, optionally restricted by a secondary predicate."""
    return sum(
        (_as_decimal(_read(r, accessor)) for r in records if where is None or where(r)),
        Decimal(0),
    )


def count_where(records: Iterable[Any], where: Optional[Callable[[Any], bool]] = None) -> int:
    return sum(1 for r in records if where is None or where(r))


def field_equals(accessor: Accessor, *values: Any) -> Callable[[Any], bool]:
    """Predicate: field value is one of values."""
    wanted = {_as_text(v) for v in values}
    return lambda record: _as_text(_read(record, accessor)) in wanted
