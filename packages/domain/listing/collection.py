"""
Page-local record collection

Holds the records of one resource as last fetched from the API. Views are
computed from it on demand; deletions are applied locally only once the
API has confirmed them.
"""
from typing import Generic, List, Optional, TypeVar

import structlog

from packages.common.busa_client import BusaApiClient, Resource
from packages.domain.listing.filters import FilteredView, ListQuery, RecordView, apply_query

logger = structlog.get_logger()

T = TypeVar("T")


class RecordCollection(Generic[T]):
    def __init__(self, client: BusaApiClient, resource: Resource, view: RecordView):
        self.client = client
        self.resource = Resource(resource)
        self.view_spec = view
        self.records: List[T] = []

    async def refresh(self) -> List[T]:
        """Reload every record from the API, replacing what is held."""
        self.records = list(await self.client.list(self.resource))
        return self.records

    def view(self, query: Optional[ListQuery] = None) -> FilteredView[T]:
        return apply_query(self.records, self.view_spec, query)

    def find(self, record_id: str) -> Optional[T]:
        for record in self.records:
            if getattr(record, "id", None) == record_id:
                return record
        return None

    async def delete(self, record_id: str) -> None:
        """
        Delete a record remotely, then drop it locally.

        Raises BusaApiError (collection unchanged) when the API refuses.
        """
        await self.client.delete(self.resource, record_id)
        before = len(self.records)
        self.records = [r for r in self.records if getattr(r, "id", None) != record_id]
        logger.info("record_removed_locally",
                    resource=self.resource.value,
                    record_id=record_id,
                    removed=before - len(self.records))
