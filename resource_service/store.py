"""
In-memory store for one resource type.

Writers (create/edit/remove) are serialized by one lock per store. Each write
builds a new mapping and publishes it with a single assignment, so readers
(list/detail) use whatever snapshot is current without taking the lock and
never observe a half-applied change.
"""

import copy
import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping

from common.errors import ResourceNotFound, StoreIntegrityError
from resource_service.schemas import Resource

logger = logging.getLogger(__name__)


class ResourceStore:
    def __init__(self, resource_type: str):
        self.resource_type = resource_type
        self._lock = threading.Lock()
        # Insertion-ordered, so iteration order == creation order
        self._items: Mapping[int, Resource] = MappingProxyType({})
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, resource_id: int) -> bool:
        return resource_id in self._items

    def list(self) -> List[Resource]:
        snapshot = self._items
        return [resource.model_copy(deep=True) for resource in snapshot.values()]

    def get(self, resource_id: int) -> Resource:
        resource = self._items.get(resource_id)
        if resource is None:
            raise ResourceNotFound(self.resource_type, resource_id)
        return resource.model_copy(deep=True)

    def create(self, payload: Dict[str, Any]) -> Resource:
        with self._lock:
            new_id = self._next_id
            if new_id in self._items:
                logger.error(
                    "Store '%s' allocated id %s which is already in use", self.resource_type, new_id
                )
                raise StoreIntegrityError(
                    "Internal storage error",
                    context={"resource_type": self.resource_type, "id": new_id},
                )

            resource = Resource(id=new_id, type=self.resource_type, payload=copy.deepcopy(payload))
            items = dict(self._items)
            items[new_id] = resource
            self._publish(items)
            # Ids are never handed out twice, even after removal
            self._next_id = new_id + 1

        logger.info("Created %s %s", self.resource_type, new_id)
        return resource.model_copy(deep=True)

    def replace(self, resource_id: int, payload: Dict[str, Any]) -> Resource:
        with self._lock:
            if resource_id not in self._items:
                raise ResourceNotFound(self.resource_type, resource_id)

            resource = Resource(id=resource_id, type=self.resource_type, payload=copy.deepcopy(payload))
            items = dict(self._items)
            items[resource_id] = resource
            self._publish(items)

        logger.info("Edited %s %s", self.resource_type, resource_id)
        return resource.model_copy(deep=True)

    def delete_many(self, resource_ids: Iterable[int]) -> List[int]:
        """Removes all ids or none of them."""
        resource_ids = list(dict.fromkeys(resource_ids))
        with self._lock:
            for resource_id in resource_ids:
                if resource_id not in self._items:
                    raise ResourceNotFound(self.resource_type, resource_id)

            items = dict(self._items)
            for resource_id in resource_ids:
                del items[resource_id]
            self._publish(items)

        logger.info("Removed %s %s", self.resource_type, resource_ids)
        return resource_ids

    def _publish(self, items: Dict[int, Resource]) -> None:
        self._items = MappingProxyType(items)
