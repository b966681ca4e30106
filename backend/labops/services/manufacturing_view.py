"""
Manufacturing list view

Pure functions over a collection of manufacturing items: dashboard
bucket counts, compound filtering, sorting and per-value option counts
for the filter dialog. No result is cached or persisted; every call
recomputes from the collection it is given and never mutates it.
"""
from collections import Counter
from datetime import datetime
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pyuca import Collator

from labops.core.status_config import BUCKET_STATUSES, Bucket
from labops.schemas.manufacturing_view import (
    FILTER_CATEGORIES,
    ManufacturingFilters,
    ManufacturingViewConfig,
    SortDirection,
    SortField,
    SortSpec,
)


def _category_values(item, category: str) -> Tuple[Optional[str], ...]:
    """Values of an item that a filter category is matched against."""
    if category == "appliance_type":
        return (item.upper_appliance_type, item.lower_appliance_type)
    return (getattr(item, category, None),)


# =============================================================================
# Counting
# =============================================================================

def count_by_bucket(items: Iterable) -> Dict[str, int]:
    """
    Count items per dashboard bucket.

    Returns:
        Dict keyed by every Bucket value, including 'all'
    """
    items = list(items)
    counts = {bucket.value: 0 for bucket in Bucket}
    for item in items:
        for bucket, statuses in BUCKET_STATUSES.items():
            if bucket != Bucket.ALL.value and item.status in statuses:
                counts[bucket] += 1
    counts[Bucket.ALL.value] = len(items)
    return counts


def filter_option_counts(items: Iterable) -> Dict[str, Dict[str, int]]:
    """For each filter category, how many items carry each value."""
    counters = {category: Counter() for category in FILTER_CATEGORIES}
    for item in items:
        for category in FILTER_CATEGORIES:
            for value in _category_values(item, category):
                if value:
                    counters[category][value] += 1
    return {category: dict(counter) for category, counter in counters.items()}


# =============================================================================
# Filtering
# =============================================================================

def matches_filters(item, filters: ManufacturingFilters) -> bool:
    """AND across categories, membership within a category; empty category = no constraint."""
    if filters.bucket is not None and filters.bucket != Bucket.ALL:
        if item.status not in BUCKET_STATUSES[filters.bucket.value]:
            return False

    for category in FILTER_CATEGORIES:
        accepted = getattr(filters, category)
        if not accepted:
            continue
        if not any(value in accepted for value in _category_values(item, category) if value):
            return False

    if filters.search:
        term = filters.search.strip().casefold()
        if term and term not in (item.patient_name or "").casefold():
            return False

    return True


def filter_items(items: Iterable, filters: Optional[ManufacturingFilters] = None) -> List:
    items = list(items)
    if filters is None or filters.is_empty():
        return items
    return [item for item in items if matches_filters(item, filters)]


# =============================================================================
# Sorting
# =============================================================================

@lru_cache(maxsize=1)
def _collator() -> Collator:
    """Unicode Collation Algorithm with the default table (loaded once)."""
    return Collator()


def _patient_name_key(item) -> Tuple[int, ...]:
    return _collator().sort_key((item.patient_name or "").casefold())


def _created_at_key(item) -> datetime:
    return item.created_at or datetime.min


_SORT_KEYS = {
    SortField.PATIENT_NAME: _patient_name_key,
    SortField.CREATED_AT: _created_at_key,
}


def sort_items(items: Iterable, sort: Optional[SortSpec] = None) -> List:
    """Stable sort into a new list; equal keys keep their incoming order in both directions."""
    sort = sort or SortSpec()
    return sorted(
        items,
        key=_SORT_KEYS[sort.sort_by],
        reverse=sort.direction == SortDirection.DESC,
    )


def filter_and_sort(
    items: Sequence,
    filters: Optional[ManufacturingFilters] = None,
    sort: Optional[SortSpec] = None,
) -> List:
    """The visible list for one filter/sort state."""
    return sort_items(filter_items(items, filters), sort)


def apply_view(items: Sequence, config: ManufacturingViewConfig) -> List:
    return filter_and_sort(items, config.filters, config.sort)
