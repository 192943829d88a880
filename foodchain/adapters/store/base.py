"""
Catalog store interface.

Records are write-once: an Item or Offer goes from absent to present and is
never updated or deleted. Every mutation runs under one lock as a full
refresh -> append -> flush cycle, so concurrent requests cannot overwrite
each other's records.
"""
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from foodchain.orchestrator.contracts import Item, Offer, StoreRoot, iso_now


def new_id() -> str:
    return str(uuid.uuid4())


class CatalogStore(ABC):
    def __init__(self, status_store, id_factory: Callable[[], str] = new_id):
        self.status = status_store
        self._new_id = id_factory
        self._root = StoreRoot()
        self._lock = threading.RLock()

    @abstractmethod
    def load(self) -> None:
        """(Re)read persisted state into memory."""
        ...

    @abstractmethod
    def flush(self) -> None:
        """Write the whole in-memory state to durable storage."""
        ...

    def _refresh(self) -> None:
        # Pick up out-of-process changes before reading or mutating.
        self.load()

    def _fresh_id(self, taken) -> str:
        used = {r.id for r in taken}
        rid = self._new_id()
        while rid in used:
            rid = self._new_id()
        return rid

    def _append(self, records: list, record) -> None:
        records.append(record)
        try:
            self.flush()
        except Exception:
            records.pop()
            raise

    def create_item(self, owner_id: Optional[str], name: Optional[str], category: Optional[str],
                    estimated_expiry: Optional[str], meta: Optional[Dict[str, Any]] = None) -> Item:
        with self._lock:
            self._refresh()
            item = Item(
                id=self._fresh_id(self._root.items),
                owner_id=owner_id,
                name=name,
                category=category,
                estimated_expiry=estimated_expiry,
                meta=meta,
                created_at=iso_now(),
            )
            self._append(self._root.items, item)
        self.status.log(f"store: item {item.id} created ({item.name})")
        return item

    def list_items(self) -> List[Item]:
        with self._lock:
            self._refresh()
            return list(self._root.items)

    def get_item(self, item_id: str) -> Optional[Item]:
        for item in self.list_items():
            if item.id == item_id:
                return item
        return None

    def create_offer(self, item_id: str, offer_type: str, actor_id: Optional[str]) -> Offer:
        with self._lock:
            self._refresh()
            offer = Offer(
                id=self._fresh_id(self._root.offers),
                item_id=item_id,
                type=offer_type,
                actor_id=actor_id,
                ts=iso_now(),
            )
            self._append(self._root.offers, offer)
        self.status.log(f"store: offer {offer.id} ({offer.type}) on item {offer.item_id}")
        return offer

    def list_offers(self) -> List[Offer]:
        with self._lock:
            self._refresh()
            return list(self._root.offers)

    def snapshot(self) -> Dict[str, Any]:
        """The full document as it would be persisted."""
        with self._lock:
            return self._root.to_dict()
