"""
Listing Module - filtered views and summary figures for list screens

Example flow (receipt activity log):
- records = await client.list(Resource.RECEIPTS)
- view = apply_query(records, views.RECEIPTS, ListQuery(date_from=..., categories={"payment_bucket": "Cash"}))
- totals = receipt_totals(view.items)
"""

from packages.domain.listing.filters import (
    ALL,
    FilteredView,
    ListQuery,
    RecordView,
    apply_query,
    count_where,
    sum_field,
)

__all__ = [
    'ALL',
    'FilteredView',
    'ListQuery',
    'RecordView',
    'apply_query',
    'count_where',
    'sum_field',
]
